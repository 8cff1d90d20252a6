"""Outcome classification and per-period analytics."""
