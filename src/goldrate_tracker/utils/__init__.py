"""Parsing and comparison helpers."""
