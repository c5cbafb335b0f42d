"""A 2048 variant played to the 128 tile on a 4x4 board."""

__version__ = "1.0.0"
