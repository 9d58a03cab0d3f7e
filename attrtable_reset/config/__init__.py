from .loader import ConfigError, ReinitConfig, load_config

__all__ = ["ConfigError", "ReinitConfig", "load_config"]
