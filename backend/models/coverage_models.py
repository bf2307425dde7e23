"""
Pydantic models for rule coverage reports.

A coverage report is rebuilt from scratch on every request; none of these
models carry incremental state.
"""

from typing import Literal

from pydantic import Field

from models.rule_models import CamelModel, RoutingAction


class CoverageRuleRef(CamelModel):
    """Rule summary stored in a matrix cell."""
    id: str
    name: str
    priority: int
    action: RoutingAction


class CoverageCell(CamelModel):
    """One requestType x location combination."""
    covered: bool = False
    rules: list[CoverageRuleRef] = Field(
        default_factory=list, description="Every matching rule, priority descending"
    )


class Combination(CamelModel):
    request_type: str
    location: str


class CoverageGap(CamelModel):
    """Combination no enabled rule covers."""
    request_type: str
    location: str
    reason: str


class CoverageConflict(CamelModel):
    """Two or more rules sharing a priority on the same combination."""
    combination: Combination
    rules: list[CoverageRuleRef]
    reason: str


class CoverageWarning(CamelModel):
    type: Literal["gap", "conflict", "orphan", "redundant"]
    severity: Literal["high", "medium", "low"]
    message: str
    affected_rules: list[str] | None = None


class CoverageStat(CamelModel):
    covered: int
    total: int
    percentage: int


class CoverageSummary(CamelModel):
    by_request_type: dict[str, CoverageStat] = Field(default_factory=dict)
    by_location: dict[str, CoverageStat] = Field(default_factory=dict)


# requestType -> location -> cell
CoverageMatrix = dict[str, dict[str, CoverageCell]]


class CoverageReport(CamelModel):
    """Aggregate coverage, gap and conflict statistics for a rule set."""
    score: int = Field(..., ge=0, le=100, description="Percentage of covered combinations")
    total_combinations: int
    covered_combinations: int
    gaps: list[CoverageGap] = Field(default_factory=list)
    conflicts: list[CoverageConflict] = Field(default_factory=list)
    warnings: list[CoverageWarning] = Field(default_factory=list)
    matrix: CoverageMatrix = Field(default_factory=dict)
    summary: CoverageSummary = Field(default_factory=CoverageSummary)
