"""Curve export and comparison reports."""
