# tests/test_io_utils.py
import pytest
import numpy as np
import pyvista as pv
import os
import yaml
from perfusion_params import io_utils, vtk_export, discretization, constants

@pytest.fixture(scope="module") # Use module scope for tmp_path to reduce overhead
def test_output_dir(tmp_path_factory):
    return tmp_path_factory.mktemp("io_test_data")

@pytest.fixture
def sample_network_file(test_output_dir):
    filepath = test_output_dir / "network.vtp"
    points = np.array([[0, 0, 0], [1, 1, 0], [2, 0, 0]], dtype=float)
    poly = pv.PolyData(points, lines=np.array([2, 0, 1, 2, 1, 2]))
    poly.cell_data[constants.BRANCH_ARRAY_NAME] = np.array([0, 1])
    poly.save(str(filepath))
    return str(filepath)

# --- Mesh loading ---
def test_load_vessel_mesh_valid(sample_network_file):
    mesh = io_utils.load_vessel_mesh(sample_network_file)
    assert mesh is not None
    assert mesh.n_points == 3
    assert mesh.n_lines == 2
    mf = discretization.vessel_discretization_from_polydata(mesh)
    assert mf.region_ids() == [0, 1]

def test_load_vessel_mesh_non_existent(caplog):
    assert io_utils.load_vessel_mesh("non_existent_network.vtp") is None
    assert "Vessel network file not found" in caplog.text

def test_load_vessel_mesh_not_polydata(test_output_dir):
    filepath = test_output_dir / "grid.vti"
    pv.ImageData(dimensions=(2, 2, 2)).save(str(filepath))
    with pytest.raises(ValueError, match="PolyData"):
        io_utils.load_vessel_mesh(str(filepath))

def test_load_tissue_mesh(test_output_dir):
    filepath = test_output_dir / "tissue.vti"
    pv.ImageData(dimensions=(3, 3, 3)).save(str(filepath))
    mesh = io_utils.load_tissue_mesh(str(filepath))
    assert mesh.n_points == 27
    assert io_utils.load_tissue_mesh(str(test_output_dir / "missing.vti")) is None

# --- VTK export ---
def test_export_point_data_legacy_vtk(test_output_dir, sample_network_file):
    mf = discretization.vessel_discretization_from_polydata(io_utils.load_vessel_mesh(sample_network_file))
    filepath = test_output_dir / "nested" / "radius.vtk"
    vtk_export.export_point_data(mf, np.array([0.1, 0.2, 0.3]), "R", str(filepath))

    loaded = pv.read(str(filepath))
    assert loaded.n_points == 3
    assert np.allclose(loaded.point_data["R"], [0.1, 0.2, 0.3])
    # the descriptor's own mesh is left untouched
    assert "R" not in mf.mesh.point_data

def test_export_point_data_size_mismatch(test_output_dir, sample_network_file):
    mf = discretization.vessel_discretization_from_polydata(io_utils.load_vessel_mesh(sample_network_file))
    with pytest.raises(ValueError, match="Cannot export 'Q'"):
        vtk_export.export_point_data(mf, np.ones(2), "Q", str(test_output_dir / "q.vtk"))

# --- Simulation parameters ---
def test_save_simulation_parameters(test_output_dir):
    filepath = test_output_dir / "config_used.yaml"
    config = {"options": {"TEST_PARAM": True}, "dimensionless_parameters": {"Kt": 1.0}}
    io_utils.save_simulation_parameters(config, str(filepath))
    assert os.path.exists(filepath)
    with open(filepath) as f:
        assert yaml.safe_load(f) == config
