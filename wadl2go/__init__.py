"""Generate Go API clients from WADL descriptions."""

__version__ = "0.1.0"
