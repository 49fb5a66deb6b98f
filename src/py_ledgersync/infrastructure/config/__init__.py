from .settings import BaseAppSettings, get_settings

__all__ = ["BaseAppSettings", "get_settings"]
