from neighborhood_safety.shared.config import Settings, get_config, reload_config
from neighborhood_safety.shared.logging_setup import setup_logging

__all__ = [
    "get_config",
    "reload_config",
    "Settings",
    "setup_logging",
]
