"""ota: publish over-the-air updates for mobile apps."""

__version__ = "0.3.0"
