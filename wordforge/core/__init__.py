"""
WordForge Core Module
=====================

Building blocks shared by the validation layer:
- Config: Layered configuration with dot-notation access
- Request: In-memory request input implementing ``InputSource``
"""

from wordforge.core.config import Config, get_config, reset_config
from wordforge.core.request import InputSource, Request

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "InputSource",
    "Request",
]
