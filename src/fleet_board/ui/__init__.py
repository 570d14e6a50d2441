"""Textual terminal client for the fleet board."""
