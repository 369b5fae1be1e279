# perfusion_params/io_utils.py
import pyvista as pv
import os
import logging
import yaml

logger = logging.getLogger(__name__)

def load_vessel_mesh(filepath: str) -> pv.PolyData | None:
    """
    Loads a vessel network mesh (.vtp or legacy .vtk PolyData made of line cells).
    Line cells may carry a 'branch' cell data array tagging their branch index.

    Args:
        filepath (str): Path to the mesh file.

    Returns:
        pyvista.PolyData: The loaded mesh, or None if the file does not exist.

    Raises:
        ValueError: If the file does not hold PolyData.
    """
    if not os.path.exists(filepath):
        logger.warning(f"Vessel network file not found: {filepath}. Skipping.")
        return None
    mesh = pv.read(filepath)
    if not isinstance(mesh, pv.PolyData):
        raise ValueError(f"Vessel network file {filepath} must contain PolyData, got {type(mesh).__name__}")
    if mesh.n_lines == 0:
        logger.warning(f"Vessel network file {filepath} contains no line cells.")
    logger.info(f"Loaded vessel network: {filepath}, {mesh.n_points} points, {mesh.n_lines} segments.")
    return mesh

def load_tissue_mesh(filepath: str) -> pv.DataSet | None:
    """Loads a tissue mesh readable by pyvista, or returns None if the file does not exist."""
    if not os.path.exists(filepath):
        logger.warning(f"Tissue mesh file not found: {filepath}. Skipping.")
        return None
    mesh = pv.read(filepath)
    logger.info(f"Loaded tissue mesh: {filepath}, {mesh.n_points} points.")
    return mesh

def save_simulation_parameters(config: dict, filepath: str):
    """Saves the configuration used for a run to a YAML file."""
    try:
        with open(filepath, 'w') as f:
            yaml.dump(config, f, sort_keys=False, indent=4)
        logger.info(f"Saved simulation parameters to: {filepath}")
    except Exception as e:
        logger.error(f"Error saving simulation parameters to {filepath}: {e}")
        raise
