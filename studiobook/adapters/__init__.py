"""
Adapters layer - Persistence backends (local JSON file, Supabase REST).
"""

from .json_store import JsonFileStore
from .rest_store import RestStore

__all__ = ["JsonFileStore", "RestStore", "build_store"]


def build_store(store_config):
    """Create the store selected in the ``store`` section of the config."""
    if store_config.backend == "rest":
        return RestStore(
            url=store_config.url,
            api_key=store_config.api_key,
            timeout=store_config.timeout,
        )
    return JsonFileStore(path=store_config.path)
