"""Shared fleet status board: engine, sync controller, persistence service and terminal client."""

__version__ = "1.0.0"
