# perfusion_params/config_manager.py
import yaml
import os
from typing import Any, Dict, Optional
import logging

from perfusion_params.errors import ConfigurationError

logger = logging.getLogger(__name__)

_MISSING = object()

def load_config(config_path: str) -> Dict[str, Any]:
    """
    Loads a YAML configuration file.

    Args:
        config_path (str): Path to the YAML configuration file.

    Returns:
        Dict[str, Any]: A dictionary containing the configuration parameters.

    Raises:
        FileNotFoundError: If the config file is not found.
        yaml.YAMLError: If there's an error parsing the YAML file.
    """
    if not os.path.exists(config_path):
        logger.error(f"Configuration file not found: {config_path}")
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logger.info(f"Successfully loaded configuration from: {config_path}")
        return config if config is not None else {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration file {config_path}: {e}")
        raise

def _lookup(config: Dict[str, Any], key_path: str) -> Any:
    value = config
    try:
        for key in key_path.split('.'):
            value = value[key]
        return value
    except (KeyError, TypeError):
        return _MISSING

def get_param(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Retrieves a parameter from the config dictionary using a dot-separated key path.
    Example: get_param(config, "physical_parameters.mu")

    Args:
        config (Dict[str, Any]): The configuration dictionary.
        key_path (str): Dot-separated path to the key (e.g., "parent.child.key").
        default (Any, optional): Default value to return if key is not found. Defaults to None.

    Returns:
        Any: The parameter value or the default value.
    """
    value = _lookup(config, key_path)
    if value is _MISSING:
        logger.warning(f"Parameter '{key_path}' not found in config. Using default: {default}")
        return default
    return value

def _require(config: Dict[str, Any], key_path: str, description: Optional[str]) -> Any:
    value = _lookup(config, key_path)
    if value is _MISSING:
        what = f" ({description})" if description else ""
        logger.error(f"Required parameter '{key_path}'{what} not found in config.")
        raise ConfigurationError(f"Required parameter '{key_path}'{what} not found in config")
    return value

def bool_value(config: Dict[str, Any], key_path: str, description: Optional[str] = None) -> bool:
    """Reads a required flag. Integers 0/1 are accepted as well as YAML booleans."""
    value = _require(config, key_path, description)
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ConfigurationError(f"Parameter '{key_path}' must be a boolean, got {value!r}")

def real_value(config: Dict[str, Any], key_path: str, description: Optional[str] = None) -> float:
    """
    Reads a required real number.

    Strings are converted with float(), since YAML 1.1 loads exponent literals
    without a decimal point (e.g. ``1e-18``) as strings.
    """
    value = _require(config, key_path, description)
    if isinstance(value, bool):
        raise ConfigurationError(f"Parameter '{key_path}' must be a real number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Parameter '{key_path}' must be a real number, got {value!r}") from None

def string_value(config: Dict[str, Any], key_path: str, description: Optional[str] = None) -> str:
    """Reads a required string."""
    value = _require(config, key_path, description)
    if not isinstance(value, str):
        raise ConfigurationError(f"Parameter '{key_path}' must be a string, got {value!r}")
    return value

def create_default_config(config_path: str = "config.yaml"):
    """
    Creates a default configuration file if it doesn't exist.
    """
    from perfusion_params import constants # To access default values

    default_config_content = {
        "paths": {
            "OutputDir": "output/parameters",
            "network_file": "data/network.vtk", # example network, regenerate with data/make_example_network.py
        },
        "simulation": {
            "log_level": "INFO", # DEBUG, INFO, WARNING, ERROR
        },
        "options": {
            "IMPORT_RADIUS": False, # read R'(s) from network.RFILE
            "TEST_PARAM": False, # True: parameters below are already dimensionless
            "EXPORT_PARAM": True,
            "VERBOSE": False,
        },
        "network": {
            "RADIUS": constants.DEFAULT_VESSEL_RADIUS, # m, or dimensionless if TEST_PARAM
            "RFILE": "data/radius.txt", # matches data/network.vtk
        },
        "physical_parameters": {
            "P": constants.DEFAULT_INTERSTITIAL_PRESSURE, # Pa
            "U": constants.DEFAULT_FLOW_SPEED, # m/s
            "d": constants.DEFAULT_CHARACTERISTIC_LENGTH, # m
            "k": constants.DEFAULT_TISSUE_PERMEABILITY, # m^2
            "mu": constants.DEFAULT_PLASMA_VISCOSITY, # kg/ms
            "Lp": constants.DEFAULT_WALL_HYDRAULIC_CONDUCTIVITY, # m^2 s/kg
        },
        "dimensionless_parameters": {
            "Kt": 1.0,
            "Q": 1.0,
            "Kv": 1.0,
        },
        "tissue": {
            "box_min": [0.0, 0.0, 0.0],
            "box_max": [1.0, 1.0, 1.0],
            "shape": [11, 11, 11], # number of points per axis
        },
    }
    if not os.path.exists(config_path):
        with open(config_path, 'w') as f:
            yaml.dump(default_config_content, f, sort_keys=False, indent=4)
        logger.info(f"Created default configuration file: {config_path}")
    else:
        logger.info(f"Configuration file already exists: {config_path}")
