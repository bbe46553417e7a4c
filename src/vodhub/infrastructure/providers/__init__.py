from .catalog import ConfigProviderCatalog
from .cms_client import (
    HttpxProviderClient,
    item_to_result,
    parse_play_url,
    parse_year,
)
from .shortvideo import ShortVideoProvider

__all__ = [
    "ConfigProviderCatalog",
    "HttpxProviderClient",
    "ShortVideoProvider",
    "item_to_result",
    "parse_play_url",
    "parse_year",
]
