"""Synchronization controller and the on-device backup slot."""
