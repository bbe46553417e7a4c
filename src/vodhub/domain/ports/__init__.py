from .event_sink import EventSinkPort
from .provider_catalog import ProviderCatalogPort
from .provider_client import BuiltinProviderPort, ProviderClientPort
from .stream_prober import StreamProberPort

__all__ = [
    "BuiltinProviderPort",
    "EventSinkPort",
    "ProviderCatalogPort",
    "ProviderClientPort",
    "StreamProberPort",
]
