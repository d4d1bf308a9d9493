"""Bank API: layered banking CRUD service."""

__version__ = "1.0.0"
