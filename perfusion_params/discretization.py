# perfusion_params/discretization.py
from __future__ import annotations
import numpy as np
import networkx as nx
import pyvista as pv
import logging
from typing import Dict, Iterator, List, Optional, Sequence

from perfusion_params import constants

logger = logging.getLogger(__name__)

# --- Discretization descriptor conventions ---
# A descriptor is a pyvista mesh whose points are the degrees of freedom (DOFs) of the
# data fields defined on it, plus a map region id -> DOF indices.
# Vessel network: region b holds the DOFs of branch b (both endpoints of every line
# cell tagged with branch b). A junction DOF belongs to every branch meeting there.
# Tissue: a single region 0 holding all points unless given otherwise.


class Discretization:
    """Point-based descriptor of the data fields living on a tissue or vessel mesh."""

    def __init__(self, mesh: pv.DataSet, regions: Optional[Dict[int, Sequence[int]]] = None, name: str = ""):
        self.mesh = mesh
        self.name = name
        if regions is None:
            regions = {0: np.arange(mesh.n_points)}
        self.regions = {int(rg): np.unique(np.asarray(dofs, dtype=int)) for rg, dofs in regions.items()}
        for rg, dofs in self.regions.items():
            if dofs.size and (dofs.min() < 0 or dofs.max() >= mesh.n_points):
                raise ValueError(f"Region {rg} of '{name}' references DOFs outside [0, {mesh.n_points})")

    @property
    def nb_dof(self) -> int:
        return self.mesh.n_points

    def region_ids(self) -> List[int]:
        return sorted(self.regions)

    def basic_dof_on_region(self, region: int) -> np.ndarray:
        """Returns the (sorted) DOF indices of a region."""
        if region not in self.regions:
            raise KeyError(f"Region {region} not defined on discretization '{self.name}'. "
                           f"Available: {self.region_ids()}")
        return self.regions[region]

    def __repr__(self):
        return f"Discretization(name={self.name!r}, nb_dof={self.nb_dof}, regions={len(self.regions)})"


def iter_line_cells(poly: pv.PolyData) -> Iterator[np.ndarray]:
    """Yields the point ids of each line cell of a PolyData (connectivity format [n, id0, ..., n, ...])."""
    lines = np.asarray(poly.lines)
    pos = 0
    while pos < lines.size:
        n = int(lines[pos])
        yield lines[pos + 1:pos + 1 + n]
        pos += n + 1


def vessel_discretization_from_polydata(poly: pv.PolyData, branch_array: str = constants.BRANCH_ARRAY_NAME,
                                        name: str = "vessel") -> Discretization:
    """
    Builds the vessel descriptor from line-cell PolyData.

    If the mesh has a cell data array `branch_array`, each line cell's points go into the
    region of that branch. Otherwise every point goes into region 0.
    """
    if branch_array not in poly.cell_data:
        logger.debug(f"No '{branch_array}' cell data on vessel mesh. Using a single region.")
        return Discretization(poly, None, name)
    if poly.n_cells != poly.n_lines:
        raise ValueError("Vessel mesh with branch tags must contain line cells only.")

    branches = np.asarray(poly.cell_data[branch_array], dtype=int)
    regions: Dict[int, List[int]] = {}
    for cell_idx, point_ids in enumerate(iter_line_cells(poly)):
        regions.setdefault(int(branches[cell_idx]), []).extend(int(p) for p in point_ids)
    logger.debug(f"Vessel mesh: {poly.n_points} DOFs, {poly.n_lines} segments, {len(regions)} branches.")
    return Discretization(poly, regions, name)


def vessel_discretization_from_graph(graph: nx.Graph, branch_attr: str = constants.BRANCH_ARRAY_NAME,
                                     pos_attr: str = 'pos', name: str = "vessel") -> Discretization:
    """
    Builds the vessel descriptor from a vascular graph.

    Nodes must carry a 3D position `pos_attr`. Each edge becomes a line cell whose branch
    is the edge attribute `branch_attr` (default 0). DOF order follows graph.nodes().
    """
    node_to_idx = {node_id: i for i, node_id in enumerate(graph.nodes())}
    points = []
    for node_id, data in graph.nodes(data=True):
        if pos_attr not in data:
            raise ValueError(f"Node {node_id} missing '{pos_attr}' attribute.")
        points.append(np.asarray(data[pos_attr], dtype=float))

    lines = []
    branches = []
    for u, v, data in graph.edges(data=True):
        lines.extend([2, node_to_idx[u], node_to_idx[v]])
        branches.append(int(data.get(branch_attr, 0)))

    if lines:
        poly = pv.PolyData(np.array(points), lines=np.array(lines))
        poly.cell_data[constants.BRANCH_ARRAY_NAME] = np.array(branches, dtype=int)
    elif points:
        poly = pv.PolyData(np.array(points))
    else:
        poly = pv.PolyData()
    return vessel_discretization_from_polydata(poly, name=name)


def tissue_box_discretization(box_min: Sequence[float], box_max: Sequence[float],
                              shape: Sequence[int], name: str = "tissue") -> Discretization:
    """Uniform point grid over an axis-aligned box. shape = number of points per axis."""
    box_min = np.asarray(box_min, dtype=float)
    box_max = np.asarray(box_max, dtype=float)
    shape = tuple(int(n) for n in shape)
    if len(shape) != 3 or box_min.shape != (3,) or box_max.shape != (3,):
        raise ValueError("Tissue box needs 3D bounds and a 3-element shape.")
    if min(shape) < 1 or np.any(box_max < box_min):
        raise ValueError(f"Invalid tissue box: min={box_min}, max={box_max}, shape={shape}")

    spacing = [(box_max[i] - box_min[i]) / (shape[i] - 1) if shape[i] > 1 else 1.0 for i in range(3)]
    grid = pv.ImageData(dimensions=shape, spacing=spacing, origin=box_min)
    return Discretization(grid, None, name)
