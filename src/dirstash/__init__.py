"""dirstash - content store and related-items engine for directory sites."""

__version__ = "0.1.0"
