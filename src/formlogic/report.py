"""
Validation report shared by all validators.

Two severities only:
    - issues: structural defects, the form cannot execute as declared
    - warnings: advisory findings that never change the status
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class ReportStatus(Enum):
    VALID = "VALID"
    INVALID = "INVALID"


@dataclass
class ValidationReport:
    """Result of a validation run."""

    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    counts: Dict[str, Any] = field(default_factory=dict)

    @property
    def status(self) -> ReportStatus:
        return ReportStatus.INVALID if self.issues else ReportStatus.VALID

    @property
    def is_valid(self) -> bool:
        return self.status == ReportStatus.VALID

    def add_issue(self, msg: str) -> None:
        """Add an issue to the report."""
        if msg not in self.issues:
            self.issues.append(msg)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    def add_recommendation(self, msg: str) -> None:
        if msg not in self.recommendations:
            self.recommendations.append(msg)
