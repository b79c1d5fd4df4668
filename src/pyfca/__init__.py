"""Football club analytics: CSV ingestion and athlete data stores."""

__version__ = "0.1.0"
