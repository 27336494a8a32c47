"""URL rewrite rules and the engine that applies them."""

from __future__ import annotations

from .engine import rewrite
from .result import RelationshipChange, RewriteResult
from .rules import (
    URL_RULES,
    CanonicalizeRule,
    MigrateRule,
    ReclassifyRule,
    RetireRule,
    RewriteRule,
    RuleKind,
    RuleTable,
)

__all__ = [
    "URL_RULES",
    "CanonicalizeRule",
    "MigrateRule",
    "ReclassifyRule",
    "RelationshipChange",
    "RetireRule",
    "RewriteResult",
    "RewriteRule",
    "RuleKind",
    "RuleTable",
    "rewrite",
]
