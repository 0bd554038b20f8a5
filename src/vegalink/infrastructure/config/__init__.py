from __future__ import annotations

from .load import load_config
from .schema import AddonConfig, AppConfig, EnvOverrides, HttpSettings

__all__ = ["AddonConfig", "AppConfig", "EnvOverrides", "HttpSettings", "load_config"]
