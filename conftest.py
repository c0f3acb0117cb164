"""Global test configuration and shared fixtures."""

from __future__ import annotations

import os
import shutil

import pytest

_POSIX_TOOLS = ("sh", "cat", "echo", "printf", "touch")
_POSIX_SHELL_AVAILABLE: bool | None = None


def _posix_shell_available() -> bool:
    """Return ``True`` when the POSIX tools used by process tests exist."""
    global _POSIX_SHELL_AVAILABLE
    if _POSIX_SHELL_AVAILABLE is None:
        _POSIX_SHELL_AVAILABLE = os.name == "posix" and all(
            shutil.which(tool) for tool in _POSIX_TOOLS
        )
    return _POSIX_SHELL_AVAILABLE


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers and cache platform capability checks."""
    config.addinivalue_line(
        "markers",
        "requires_posix_shell: mark test as spawning POSIX shell utilities",
    )
    _posix_shell_available()


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip tests needing POSIX utilities when they are unavailable."""
    if _posix_shell_available():
        return
    skip = pytest.mark.skip(reason="POSIX shell utilities are not available")
    for item in items:
        if "requires_posix_shell" in item.keywords:
            item.add_marker(skip)
