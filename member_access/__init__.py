"""Member roster, access gate and parking counter service."""

__version__ = "1.0.0"
