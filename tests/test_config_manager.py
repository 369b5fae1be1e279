# tests/test_config_manager.py
import pytest
import yaml
import os
from perfusion_params import config_manager
from perfusion_params.errors import ConfigurationError
import logging

# Fixture to create a temporary valid config file
@pytest.fixture
def temp_valid_config_file(tmp_path):
    config_data = {
        "paths": {"OutputDir": "test_output"},
        "options": {"IMPORT_RADIUS": False, "TEST_PARAM": 1},
        "physical_parameters": {"P": 1333.0, "k": "1e-18", "mu": "abc"},
        "nested_params": {"level1": {"level2": "value"}}
    }
    config_file = tmp_path / "valid_config.yaml"
    with open(config_file, 'w') as f:
        yaml.dump(config_data, f)
    return str(config_file), config_data

# Fixture to create a temporary malformed config file
@pytest.fixture
def temp_malformed_config_file(tmp_path):
    config_file = tmp_path / "malformed_config.yaml"
    with open(config_file, 'w') as f:
        f.write("paths: {OutputDir: test_output\nlog_level: INFO") # Malformed YAML
    return str(config_file)

def test_load_config_valid(temp_valid_config_file):
    config_path, expected_data = temp_valid_config_file
    config = config_manager.load_config(config_path)
    assert config == expected_data

def test_load_config_empty_file(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    assert config_manager.load_config(str(config_file)) == {}

def test_load_config_non_existent():
    with pytest.raises(FileNotFoundError):
        config_manager.load_config("non_existent_config.yaml")

def test_load_config_malformed(temp_malformed_config_file):
    with pytest.raises(yaml.YAMLError):
        config_manager.load_config(temp_malformed_config_file)

def test_get_param_existing(temp_valid_config_file):
    config = config_manager.load_config(temp_valid_config_file[0])
    assert config_manager.get_param(config, "paths.OutputDir") == "test_output"
    assert config_manager.get_param(config, "physical_parameters.P") == 1333.0
    assert config_manager.get_param(config, "nested_params.level1.level2") == "value"

def test_get_param_non_existent(temp_valid_config_file, caplog):
    config = config_manager.load_config(temp_valid_config_file[0])
    assert config_manager.get_param(config, "non.existent.key") is None
    assert config_manager.get_param(config, "non.existent.key", "default_val") == "default_val"
    assert config_manager.get_param(config, "options.non_existent", 999) == 999
    assert "Parameter 'options.non_existent' not found in config" in caplog.text

# --- Typed required lookups ---
def test_bool_value(temp_valid_config_file):
    config = config_manager.load_config(temp_valid_config_file[0])
    assert config_manager.bool_value(config, "options.IMPORT_RADIUS") is False
    assert config_manager.bool_value(config, "options.TEST_PARAM") is True
    with pytest.raises(ConfigurationError, match="must be a boolean"):
        config_manager.bool_value(config, "paths.OutputDir")

def test_real_value(temp_valid_config_file):
    config = config_manager.load_config(temp_valid_config_file[0])
    assert config_manager.real_value(config, "physical_parameters.P") == 1333.0
    assert config_manager.real_value(config, "physical_parameters.k") == 1e-18
    with pytest.raises(ConfigurationError, match="must be a real number"):
        config_manager.real_value(config, "physical_parameters.mu")
    with pytest.raises(ConfigurationError, match="must be a real number"):
        config_manager.real_value(config, "options.IMPORT_RADIUS")

def test_string_value(temp_valid_config_file):
    config = config_manager.load_config(temp_valid_config_file[0])
    assert config_manager.string_value(config, "paths.OutputDir") == "test_output"
    with pytest.raises(ConfigurationError, match="must be a string"):
        config_manager.string_value(config, "physical_parameters.P")

def test_required_value_missing_includes_description():
    with pytest.raises(ConfigurationError, match=r"'physical_parameters.U' \(characteristic flow speed\)"):
        config_manager.real_value({}, "physical_parameters.U", "characteristic flow speed")

# --- Default config ---
def test_create_default_config_new_file(tmp_path):
    default_config_path = tmp_path / "default_config.yaml"
    assert not os.path.exists(default_config_path)

    config_manager.create_default_config(str(default_config_path))
    assert os.path.exists(default_config_path)

    loaded_default_config = config_manager.load_config(str(default_config_path))
    assert "OutputDir" in loaded_default_config["paths"]
    # Every physical parameter loads back as a real number
    for key in ("P", "U", "d", "k", "mu", "Lp"):
        assert isinstance(config_manager.real_value(loaded_default_config, f"physical_parameters.{key}"), float)
    assert config_manager.bool_value(loaded_default_config, "options.TEST_PARAM") is False

def test_create_default_config_existing_file(tmp_path, caplog):
    default_config_path = tmp_path / "existing_default_config.yaml"
    with open(default_config_path, "w") as f:
        f.write("some: content")

    with caplog.at_level(logging.INFO, logger="perfusion_params.config_manager"):
        config_manager.create_default_config(str(default_config_path))

    with open(default_config_path, "r") as f:
        assert f.read() == "some: content"
    assert f"Configuration file already exists: {str(default_config_path)}" in caplog.text
