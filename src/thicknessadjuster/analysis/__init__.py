"""Connectivity analysis: shape graph building and segment classification."""
