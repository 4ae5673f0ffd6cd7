"""Adjustment of segment lengths and propagation of the moved endpoints."""
