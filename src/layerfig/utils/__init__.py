"""Utility modules for layerfig."""
