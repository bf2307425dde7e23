"""
Rule Coverage Analyzer.

Enumerates every requestType x location combination and reports which
enabled rules would apply to each, where the gaps are, and where rules tie on
priority. Only the requestType and location conditions of a rule are
considered; value, department and urgency conditions are ignored here.
"""

from collections import defaultdict
from collections.abc import Sequence

from config.legal_constants import LOCATIONS, REQUEST_TYPES
from config.logging_config import get_logger
from models.coverage_models import (
    Combination,
    CoverageCell,
    CoverageConflict,
    CoverageGap,
    CoverageMatrix,
    CoverageReport,
    CoverageRuleRef,
    CoverageStat,
    CoverageSummary,
    CoverageWarning,
)
from models.rule_models import ConditionField, Rule, RoutingAction
from services.condition_evaluator import values_equal

logger = get_logger(__name__)

SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# Below this percentage of locations a partially covered request type is high severity
LOW_COVERAGE_PERCENT = 30


def _percentage(part: int, whole: int) -> int:
    """Whole percentage, halves rounded up (12.5 -> 13)."""
    if not whole:
        return 0
    return (part * 200 + whole) // (whole * 2)


class RuleCoverageAnalyzer:
    """
    Build coverage reports for a rule set.

    The enumerations are injected so tests can use small axes; they default
    to the legal request types and locations.
    """

    def __init__(
        self,
        request_types: Sequence[str] | None = None,
        locations: Sequence[str] | None = None,
    ):
        self.request_types = list(REQUEST_TYPES if request_types is None else request_types)
        self.locations = list(LOCATIONS if locations is None else locations)

    def analyze_coverage(self, rules: list[Rule]) -> CoverageReport:
        """
        Generate a full coverage report.

        Args:
            rules: Current rule snapshot. Disabled rules are ignored; nothing
                is modified.
        """
        enabled_rules = [r for r in rules if r.enabled]

        matrix = self.build_matrix(enabled_rules)
        gaps = self.find_gaps(matrix)
        conflicts = self.find_conflicts(matrix)

        cells = [cell for row in matrix.values() for cell in row.values()]
        total = len(cells)
        covered = sum(1 for cell in cells if cell.covered)

        report = CoverageReport(
            score=_percentage(covered, total),
            total_combinations=total,
            covered_combinations=covered,
            gaps=gaps,
            conflicts=conflicts,
            warnings=self.generate_warnings(conflicts, enabled_rules, matrix),
            matrix=matrix,
            summary=self.generate_summary(matrix),
        )

        logger.info(
            "Coverage analyzed",
            rule_count=len(enabled_rules),
            score=report.score,
            gaps=len(gaps),
            conflicts=len(conflicts),
            warnings=len(report.warnings),
        )
        return report

    def covers(self, rule: Rule, request_type: str, location: str) -> bool:
        """
        A rule covers a cell when each of its requestType conditions names the
        cell's request type and each location condition names its location.
        A rule without conditions on an axis covers every value of it.
        """
        for condition in rule.conditions:
            if condition.field == ConditionField.REQUEST_TYPE:
                if not values_equal(request_type, condition.value):
                    return False
            elif condition.field == ConditionField.LOCATION:
                if not values_equal(location, condition.value):
                    return False
        return True

    def build_matrix(self, rules: list[Rule]) -> CoverageMatrix:
        """Matrix of every requestType x location cell with its matching rules."""
        matrix: CoverageMatrix = {}

        for request_type in self.request_types:
            row: dict[str, CoverageCell] = {}
            for location in self.locations:
                matching = sorted(
                    (r for r in rules if self.covers(r, request_type, location)),
                    key=lambda r: r.priority,
                    reverse=True,
                )
                row[location] = CoverageCell(
                    covered=bool(matching),
                    rules=[
                        CoverageRuleRef(
                            id=r.id,
                            name=r.name,
                            priority=r.priority,
                            action=RoutingAction(assign_to=r.action.assign_to),
                        )
                        for r in matching
                    ],
                )
            matrix[request_type] = row

        return matrix

    def find_gaps(self, matrix: CoverageMatrix) -> list[CoverageGap]:
        """Every uncovered combination."""
        return [
            CoverageGap(
                request_type=request_type,
                location=location,
                reason=f"No rule covers {request_type} requests from {location}",
            )
            for request_type, row in matrix.items()
            for location, cell in row.items()
            if not cell.covered
        ]

    def find_conflicts(self, matrix: CoverageMatrix) -> list[CoverageConflict]:
        """
        Combinations where two or more rules share a priority.

        Rules at different priorities are resolved by priority order and are
        not reported.
        """
        conflicts: list[CoverageConflict] = []

        for request_type, row in matrix.items():
            for location, cell in row.items():
                if len(cell.rules) < 2:
                    continue

                by_priority: dict[int, list[CoverageRuleRef]] = defaultdict(list)
                for ref in cell.rules:
                    by_priority[ref.priority].append(ref)

                for priority in sorted(by_priority):
                    group = by_priority[priority]
                    if len(group) < 2:
                        continue
                    conflicts.append(
                        CoverageConflict(
                            combination=Combination(request_type=request_type, location=location),
                            rules=group,
                            reason=(
                                f"Multiple rules with priority {priority} match this combination. "
                                "First rule will be used, but this may be unintentional."
                            ),
                        )
                    )

        return conflicts

    def generate_warnings(
        self,
        conflicts: list[CoverageConflict],
        rules: list[Rule],
        matrix: CoverageMatrix,
    ) -> list[CoverageWarning]:
        """Warnings ordered high -> medium -> low severity."""
        warnings: list[CoverageWarning] = []
        location_count = len(self.locations)

        for request_type in self.request_types:
            covered = sum(1 for cell in matrix[request_type].values() if cell.covered)

            if covered == 0:
                warnings.append(CoverageWarning(
                    type="gap",
                    severity="high",
                    message=(
                        f'Critical: "{request_type}" has NO coverage in any location. '
                        "All requests will fall back to general team."
                    ),
                ))
            elif covered < location_count:
                percent = _percentage(covered, location_count)
                warnings.append(CoverageWarning(
                    type="gap",
                    severity="high" if percent < LOW_COVERAGE_PERCENT else "medium",
                    message=(
                        f'"{request_type}" only has {percent}% location coverage '
                        f"({covered}/{location_count} locations)."
                    ),
                ))

        for conflict in conflicts:
            warnings.append(CoverageWarning(
                type="conflict",
                severity="medium",
                message=conflict.reason,
                affected_rules=[ref.id for ref in conflict.rules],
            ))

        usage: dict[str, int] = {rule.id: 0 for rule in rules}
        for row in matrix.values():
            for cell in row.values():
                for ref in cell.rules:
                    usage[ref.id] = usage.get(ref.id, 0) + 1

        for rule in rules:
            if usage[rule.id] == 0:
                warnings.append(CoverageWarning(
                    type="orphan",
                    severity="low",
                    message=(
                        f'Rule "{rule.name}" never matches any requestType/location combination. '
                        "It may have impossible conditions or be shadowed by higher-priority rules."
                    ),
                    affected_rules=[rule.id],
                ))

        return sorted(warnings, key=lambda w: SEVERITY_ORDER[w.severity])

    def generate_summary(self, matrix: CoverageMatrix) -> CoverageSummary:
        """Per-requestType and per-location coverage counts."""
        by_request_type: dict[str, CoverageStat] = {}
        for request_type in self.request_types:
            covered = sum(1 for loc in self.locations if matrix[request_type][loc].covered)
            total = len(self.locations)
            by_request_type[request_type] = CoverageStat(
                covered=covered, total=total, percentage=_percentage(covered, total)
            )

        by_location: dict[str, CoverageStat] = {}
        for location in self.locations:
            covered = sum(1 for rt in self.request_types if matrix[rt][location].covered)
            total = len(self.request_types)
            by_location[location] = CoverageStat(
                covered=covered, total=total, percentage=_percentage(covered, total)
            )

        return CoverageSummary(by_request_type=by_request_type, by_location=by_location)


# Singleton instance
_analyzer_instance: RuleCoverageAnalyzer | None = None


def get_coverage_analyzer() -> RuleCoverageAnalyzer:
    """Get the singleton analyzer built on the legal constants."""
    global _analyzer_instance
    if _analyzer_instance is None:
        _analyzer_instance = RuleCoverageAnalyzer()
    return _analyzer_instance
