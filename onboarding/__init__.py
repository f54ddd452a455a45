"""Account identity and registration core."""

__version__ = "0.3.0"
