"""DriveEasy driving-school booking backend."""

__version__ = "2.0.0"
