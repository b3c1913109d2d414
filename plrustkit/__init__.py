"""Allow-lists, version requirements, compilation targets, settings and stored function entries."""

__version__ = "1.2.8"