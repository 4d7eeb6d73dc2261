"""ERP data-access tools for automated assistants."""

__version__ = "0.1.0"
