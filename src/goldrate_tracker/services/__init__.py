"""Reconciliation, analysis and scheduling services."""
