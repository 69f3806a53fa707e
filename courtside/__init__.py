"""Courtside: volleyball scorekeeping and winner-stays team rotation."""

__version__ = "0.1.0"
