"""Column-family garbage-collection policy compiler and manager."""

__version__ = "0.1.0"
