"""Securities metadata and price data from external providers, with vendor fallback."""

__version__ = "0.1.0"
