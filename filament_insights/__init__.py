"""Ingestion and analysis of filament strength test workbooks."""

__version__ = "0.1.0"
