"""pymint core: configuration loading."""

from pymint.core.config import Config, config_properties

__all__ = ["Config", "config_properties"]
