"""Arm raise coach: phase, rep, and form tracking from pose landmark frames."""

__version__ = "0.1.0"
