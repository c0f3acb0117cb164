"""Unit tests for exec_sanitize."""
