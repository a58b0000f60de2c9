"""Mentee attendance reconciliation against session-call exports."""

__version__ = "0.1.0"
