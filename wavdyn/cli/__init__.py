"""Command-line and console front ends."""
