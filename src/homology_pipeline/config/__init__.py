from .loader import load_config, load_config_or_defaults, load_config_with_overrides
from .schema import HomologyConfig, EndpointConfig, APIConfig

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "load_config_or_defaults",
    "HomologyConfig",
    "EndpointConfig",
    "APIConfig",
]
