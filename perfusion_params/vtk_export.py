# perfusion_params/vtk_export.py
import numpy as np
import os
import logging

from perfusion_params.discretization import Discretization

logger = logging.getLogger(__name__)

def export_point_data(discretization: Discretization, values: np.ndarray, name: str, filepath: str):
    """
    Writes the mesh of `discretization` with `values` attached as point data `name`.
    The writer is chosen from the file extension (legacy .vtk, .vtp, .vtu, ...).
    """
    values = np.asarray(values, dtype=float)
    if values.shape != (discretization.nb_dof,):
        raise ValueError(f"Cannot export '{name}': {values.size} values for {discretization.nb_dof} DOFs.")

    mesh = discretization.mesh.copy()
    mesh.point_data[name] = values

    out_dir = os.path.dirname(filepath)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    try:
        mesh.save(filepath)
        logger.info(f"Exported point data '{name}' to: {filepath}")
    except Exception as e:
        logger.error(f"Error exporting point data '{name}' to {filepath}: {e}")
        raise
