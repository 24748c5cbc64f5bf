"""Mentor availability and session booking for the alumni community app."""

__version__ = "0.1.0"
