"""Shared helpers for the behavioural test suite."""
