"""vodhub: multi-provider video search, source scoring and media relay."""

__version__ = "0.1.0"
