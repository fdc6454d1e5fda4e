"""harmonycheck: four-part harmony rule validation."""

__version__ = "0.1.0"
