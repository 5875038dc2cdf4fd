"""Crossplane resource definitions -> Backstage templates and API entities."""

__version__ = "0.1.0"
