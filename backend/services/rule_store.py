"""
In-memory rule store.

Holds the current rule set for the API. Nothing is persisted; a restart
reloads the seed rules. Readers get deep-copied snapshots so a routing or
coverage call never sees a rule list that changes underneath it.
"""

import secrets
import threading
import time
from collections import defaultdict
from datetime import datetime, timezone

from config.config import get_settings
from config.logging_config import get_logger
from models.models import RuleCreate, RuleUpdate
from models.rule_models import Rule
from services.seed_data import get_seed_rules

logger = get_logger(__name__)


class RuleNotFoundError(KeyError):
    """Raised when a rule id is not in the store."""

    def __init__(self, rule_id: str):
        super().__init__(rule_id)
        self.rule_id = rule_id

    def __str__(self) -> str:
        return f"Rule not found: {self.rule_id}"


def generate_rule_id() -> str:
    """``rule-<epoch ms>-<random>`` style id."""
    return f"rule-{int(time.time() * 1000)}-{secrets.token_hex(4)[:7]}"


class RuleStore:
    """Thread-safe, in-memory list of routing rules."""

    def __init__(self, rules: list[Rule] | None = None):
        self._lock = threading.Lock()
        self._rules: list[Rule] = [r.model_copy(deep=True) for r in rules or []]

    def list_rules(self) -> list[Rule]:
        """Snapshot of all rules in insertion order."""
        with self._lock:
            return [r.model_copy(deep=True) for r in self._rules]

    def get_rule(self, rule_id: str) -> Rule:
        with self._lock:
            return self._find(rule_id).model_copy(deep=True)

    def add_rule(self, payload: RuleCreate) -> Rule:
        """Create a rule, filling in id, priority and timestamps."""
        rule = Rule(
            id=payload.id or generate_rule_id(),
            name=payload.name,
            description=payload.description,
            enabled=payload.enabled,
            priority=payload.priority or 1,
            conditions=payload.conditions,
            action=payload.action,
            created_at=datetime.now(timezone.utc).isoformat(),
            match_count=0,
        )
        with self._lock:
            self._rules.append(rule)
        logger.info("Rule created", rule_id=rule.id, name=rule.name, priority=rule.priority)
        return rule.model_copy(deep=True)

    def update_rule(self, rule_id: str, payload: RuleUpdate) -> Rule:
        """Apply a partial update; the id is preserved."""
        changes = payload.model_dump(exclude_unset=True)
        with self._lock:
            index = self._index(rule_id)
            current = self._rules[index]
            merged = current.model_dump()
            merged.update(changes)
            merged["id"] = rule_id
            updated = Rule.model_validate(merged)
            self._rules[index] = updated
        logger.info("Rule updated", rule_id=rule_id, fields=sorted(changes))
        return updated.model_copy(deep=True)

    def delete_rule(self, rule_id: str) -> None:
        with self._lock:
            del self._rules[self._index(rule_id)]
        logger.info("Rule deleted", rule_id=rule_id)

    def increment_match_count(self, rule_id: str) -> None:
        """Record a routed match. Unknown ids are ignored."""
        with self._lock:
            for index, rule in enumerate(self._rules):
                if rule.id == rule_id:
                    self._rules[index] = rule.model_copy(
                        update={"match_count": rule.match_count + 1}
                    )
                    return

    def rules_by_assignee(self) -> dict[str, list[Rule]]:
        grouped: dict[str, list[Rule]] = defaultdict(list)
        for rule in self.list_rules():
            grouped[rule.action.assign_to].append(rule)
        return dict(grouped)

    def assignees(self) -> list[str]:
        """Unique assignees in first-seen order."""
        return list(dict.fromkeys(r.action.assign_to for r in self.list_rules()))

    def _index(self, rule_id: str) -> int:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                return index
        raise RuleNotFoundError(rule_id)

    def _find(self, rule_id: str) -> Rule:
        return self._rules[self._index(rule_id)]


# Singleton instance
_store_instance: RuleStore | None = None


def get_rule_store() -> RuleStore:
    """Get the singleton rule store, seeded when enabled in settings."""
    global _store_instance
    if _store_instance is None:
        settings = get_settings()
        seed = get_seed_rules() if settings.seed_rules_enabled else []
        _store_instance = RuleStore(seed)
        logger.info("Rule store initialized", rule_count=len(seed))
    return _store_instance
