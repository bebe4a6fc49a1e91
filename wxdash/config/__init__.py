"""Configuration for wxdash."""

from .constants import WXDASH_CONFIG_DIR
from .settings import get_registry_overrides_path, get_storage_dir

__all__ = ["WXDASH_CONFIG_DIR", "get_registry_overrides_path", "get_storage_dir"]
