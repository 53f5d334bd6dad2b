"""Meeting-preparation document ingestion."""

__version__ = "0.1.0"
