# data/make_example_network.py
# Writes a small Y-shaped vessel network (network.vtk) and a matching radius file
# (radius.txt, one radius per branch) next to this script.
import os
import logging
import numpy as np
import networkx as nx

from perfusion_params import discretization

logger = logging.getLogger(__name__)

def build_y_network() -> nx.DiGraph:
    graph = nx.DiGraph()
    graph.add_node("inlet", pos=np.array([0.1, 0.5, 0.5]))
    graph.add_node("mid", pos=np.array([0.3, 0.5, 0.5]))
    graph.add_node("bif", pos=np.array([0.5, 0.5, 0.5]))
    graph.add_node("t1", pos=np.array([0.9, 0.8, 0.5]))
    graph.add_node("t2", pos=np.array([0.9, 0.2, 0.5]))
    graph.add_edge("inlet", "mid", branch=0)
    graph.add_edge("mid", "bif", branch=0)
    graph.add_edge("bif", "t1", branch=1)
    graph.add_edge("bif", "t2", branch=2)
    return graph

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    out_dir = os.path.dirname(os.path.abspath(__file__))

    mf_vessel = discretization.vessel_discretization_from_graph(build_y_network())
    network_path = os.path.join(out_dir, "network.vtk")
    mf_vessel.mesh.save(network_path)
    logger.info(f"Saved example network ({mf_vessel.nb_dof} DOFs) to {network_path}")

    # Dimensionless radii (R / d) of branches 0, 1, 2
    radius_path = os.path.join(out_dir, "radius.txt")
    with open(radius_path, 'w') as f:
        f.write("BEGIN_LIST\n")
        for r in (0.04, 0.03, 0.025):
            f.write(f"BEGIN_ARC\n  {r}\nEND_ARC\n")
        f.write("END_LIST\n")
    logger.info(f"Saved example radius file to {radius_path}")
