"""Pivot Workflow Engine: proceed / patch / pivot decision workflow core."""

__version__ = "0.1.0"
