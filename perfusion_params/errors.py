# perfusion_params/errors.py


class ConfigurationError(ValueError):
    """Raised when the configuration is inconsistent, incomplete or physically invalid."""
