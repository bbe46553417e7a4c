from .event_channel import SearchEventChannel, encode_sse

__all__ = ["SearchEventChannel", "encode_sse"]
