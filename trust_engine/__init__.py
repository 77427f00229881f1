"""Trust scoring engine for alternative-data micro-lending."""

__version__ = "1.0.0"
