"""Diagnostic and statistics types shared by the tree builder and the API.

Diagnostics describe markup the builder tolerated (stray end tags, orphan
self-closing tags). They are informational only and are never raised.
"""

import time
from dataclasses import asdict, dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    INFO = auto()       # Markup kept but relocated
    WARNING = auto()    # Markup dropped from the tree


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to a JSON-friendly dictionary."""
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "position": self.position,
            "details": self.details,
        }


@dataclass
class BuildStatistics:
    """Counters collected while building one tree."""

    tokens_processed: int = 0
    nodes_created: int = 0
    ignored_end_tags: int = 0
    orphan_self_closing_tags: int = 0
    ignored_tokens: int = 0
    processing_time_ms: float = 0.0

    @property
    def tolerated_count(self) -> int:
        """Number of malformed tags that were silently tolerated."""
        return self.ignored_end_tags + self.orphan_self_closing_tags

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_processed * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["tolerated_count"] = self.tolerated_count
        return result
