"""Read-only snapshot types for the rules served by an external rule manager."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Protocol, Sequence, Union

import yaml
from pydantic import BaseModel, Field, field_validator

log = logging.getLogger("ruleui.rules")


class AlertState(IntEnum):
    """Alert state, ordered by severity."""

    INACTIVE = 0
    PENDING = 1
    FIRING = 2

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: object) -> "AlertState":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown alert state: {value!r}") from None
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise ValueError(f"unknown alert state: {value!r}")


class RuleHealth(str, Enum):
    UNKNOWN = "unknown"
    GOOD = "ok"
    BAD = "err"


class PartialResponseStrategy(str, Enum):
    WARN = "warn"
    ABORT = "abort"


class Alert(BaseModel):
    """A single active alert produced by an alerting rule."""

    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    state: AlertState = AlertState.PENDING
    active_at: Optional[datetime] = None
    value: float = 0.0

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, value: object) -> AlertState:
        return AlertState.parse(value)


class AlertingRule(BaseModel):
    type: Literal["alerting"] = "alerting"
    name: str = Field(..., min_length=1)
    query: str = ""
    duration: float = Field(0.0, ge=0, description="Seconds the condition must hold before firing")
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    state: AlertState = AlertState.INACTIVE
    health: RuleHealth = RuleHealth.UNKNOWN
    last_error: Optional[str] = None
    last_evaluation: Optional[datetime] = None
    evaluation_duration: float = 0.0
    alerts: List[Alert] = Field(default_factory=list)
    partial_response_strategy: PartialResponseStrategy = PartialResponseStrategy.WARN

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, value: object) -> AlertState:
        return AlertState.parse(value)


class RecordingRule(BaseModel):
    type: Literal["recording"] = "recording"
    name: str = Field(..., min_length=1)
    query: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    health: RuleHealth = RuleHealth.UNKNOWN
    last_error: Optional[str] = None
    last_evaluation: Optional[datetime] = None
    evaluation_duration: float = 0.0


Rule = Annotated[Union[AlertingRule, RecordingRule], Field(discriminator="type")]


class RuleGroup(BaseModel):
    name: str = Field(..., min_length=1)
    file: str = ""
    interval: float = Field(60.0, gt=0)
    rules: List[Rule] = Field(default_factory=list)
    last_evaluation: Optional[datetime] = None
    evaluation_duration: float = 0.0
    partial_response_strategy: PartialResponseStrategy = PartialResponseStrategy.WARN

    def alerting_rules(self) -> List[AlertingRule]:
        return [rule for rule in self.rules if isinstance(rule, AlertingRule)]


class RuleManager(Protocol):
    """What the UI needs from the component evaluating rules."""

    def alerting_rules(self) -> Sequence[AlertingRule]:
        ...

    def rule_groups(self) -> Sequence[RuleGroup]:
        ...


class StaticRuleManager:
    """Serves a fixed set of rule groups, e.g. a snapshot loaded from disk."""

    def __init__(self, groups: Sequence[RuleGroup] = ()) -> None:
        self._groups = tuple(groups)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "StaticRuleManager":
        text = Path(path).read_text(encoding="utf-8")
        doc = yaml.safe_load(text) or {}
        groups = [RuleGroup.model_validate(item) for item in doc.get("groups") or []]
        log.info("Loaded %d rule group(s) from %s", len(groups), path)
        return cls(groups)

    def rule_groups(self) -> Sequence[RuleGroup]:
        return self._groups

    def alerting_rules(self) -> Sequence[AlertingRule]:
        return [rule for group in self._groups for rule in group.alerting_rules()]


def sort_alerts(alerts: Sequence[AlertingRule]) -> List[AlertingRule]:
    """Order alerting rules most severe state first, then by name.

    Returns a new list. A rule whose state is not an ``AlertState`` raises
    ``ValueError``.
    """

    return sorted(alerts, key=lambda rule: (-AlertState.parse(rule.state), rule.name))
