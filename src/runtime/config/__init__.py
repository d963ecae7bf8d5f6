from .config_data import ConfigData
from .config_loader import load_config, load_config_or_default

__all__ = ["ConfigData", "load_config", "load_config_or_default"]
