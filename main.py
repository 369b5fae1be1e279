# main.py
import argparse
import logging
import os
import sys
import time

from perfusion_params import config_manager, constants, io_utils
from perfusion_params import discretization
from perfusion_params.errors import ConfigurationError
from perfusion_params.params import PhysicalParameters, summarize_parameters

logger = logging.getLogger(__name__)


def setup_logging(log_level_str: str, log_file: str):
    """Configures logging for the run."""
    numeric_level = getattr(logging, log_level_str.upper(), None)
    if not isinstance(numeric_level, int): # Fallback if level is invalid
        print(f"Warning: Invalid log level '{log_level_str}'. Defaulting to INFO.")
        numeric_level = logging.INFO

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, mode='w'), # Overwrite log file each run
            logging.StreamHandler()
        ]
    )
    if numeric_level > logging.DEBUG:
        logging.getLogger('pyvista').setLevel(logging.WARNING)


def parse_arguments(argv=None):
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(description="Dimensionless parameters of the coupled 3D/1D perfusion model")
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to the YAML configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default=None,
        help="Override paths.OutputDir from the config file."
    )
    return parser.parse_args(argv)


def load_discretizations(config: dict):
    """Builds the tissue and vessel descriptors named in the config."""
    tissue_mesh_path = config_manager.get_param(config, "paths.tissue_mesh", None)
    tissue_mesh = io_utils.load_tissue_mesh(tissue_mesh_path) if tissue_mesh_path else None
    if tissue_mesh is not None:
        mf_tissue = discretization.Discretization(tissue_mesh, None, "tissue")
    else:
        mf_tissue = discretization.tissue_box_discretization(
            config_manager.get_param(config, "tissue.box_min", [0.0, 0.0, 0.0]),
            config_manager.get_param(config, "tissue.box_max", [1.0, 1.0, 1.0]),
            config_manager.get_param(config, "tissue.shape", [11, 11, 11]),
        )
        logger.info(f"Using uniform tissue box with {mf_tissue.nb_dof} points.")

    network_path = config_manager.get_param(config, "paths.network_file", None)
    vessel_mesh = io_utils.load_vessel_mesh(network_path) if network_path else None
    if vessel_mesh is None:
        raise ConfigurationError(f"A vessel network file (paths.network_file) is required, got {network_path!r}. "
                                 "An example one can be written with data/make_example_network.py.")
    mf_vessel = discretization.vessel_discretization_from_polydata(vessel_mesh)
    return mf_tissue, mf_vessel


def main(argv=None) -> int:
    args = parse_arguments(argv)
    config = config_manager.load_config(args.config)
    if args.output_dir:
        config.setdefault("paths", {})["OutputDir"] = args.output_dir

    output_dir = config_manager.get_param(config, constants.KEY_OUTPUT_DIR, "output")
    setup_logging(config_manager.get_param(config, "simulation.log_level", "INFO"),
                  os.path.join(output_dir, "parameters.log"))
    start_time = time.time()

    try:
        mf_tissue, mf_vessel = load_discretizations(config)
        verbose = False
        if config_manager.get_param(config, constants.KEY_VERBOSE) is not None:
            verbose = config_manager.bool_value(config, constants.KEY_VERBOSE, "verbose build progress")
        params = PhysicalParameters().build(config, mf_tissue, mf_vessel, verbose=verbose)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    print(params)
    logger.info(f"Field statistics:\n{summarize_parameters(params)}")
    io_utils.save_simulation_parameters(config, os.path.join(output_dir, "config_used.yaml"))
    logger.info(f"Finished in {time.time() - start_time:.2f}s. Output: {output_dir}")
    return 0


if __name__ == "__main__":
    if not os.path.exists("config.yaml") and "--config" not in sys.argv:
        config_manager.create_default_config("config.yaml")
    sys.exit(main())
