"""Ruleweave - composable predicate rules with structured error reporting."""

from __future__ import annotations

__version__ = "0.4.0"
