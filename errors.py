# errors.py
class ConfigurationError(ValueError):
    """Raised for invalid run settings before any grid mutation happens."""
