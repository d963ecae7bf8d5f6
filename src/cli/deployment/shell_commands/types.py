"""Data types for shell command results.

CommandResult is re-exported from src.infra.k8s.controller so shell
commands and cluster controllers report results the same way.
"""

from __future__ import annotations

from src.infra.k8s.controller import CommandResult

__all__ = ["CommandResult"]
