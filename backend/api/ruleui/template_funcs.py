"""Helpers exposed to the rule UI templates."""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from jinja2 import Environment

from .rules import AlertState, RuleHealth

_SI_PREFIXES = ("m", "u", "n", "p", "f", "a", "z", "y")

# $$, ${name}, $name
_GROUP_REF = re.compile(r"\$(?:(\$)|\{(\w+)\}|(\w+))")


def since(t: datetime, now: Optional[datetime] = None) -> timedelta:
    """Time elapsed since ``t``, truncated to whole milliseconds."""

    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed = now - t
    return timedelta(milliseconds=math.trunc(elapsed / timedelta(milliseconds=1)))


def alert_state_to_class(state: AlertState) -> str:
    if state == AlertState.INACTIVE:
        return "success"
    if state == AlertState.PENDING:
        return "warning"
    if state == AlertState.FIRING:
        return "danger"
    raise ValueError(f"unknown alert state: {state!r}")


def rule_health_to_class(health: RuleHealth) -> str:
    if health == RuleHealth.UNKNOWN:
        return "warning"
    if health == RuleHealth.GOOD:
        return "success"
    return "danger"


def re_replace_all(pattern: str, repl: str, text: str) -> str:
    """Replace every match of ``pattern`` in ``text``.

    ``repl`` refers to groups as ``$1``, ``${1}``, ``$name`` or ``${name}``;
    ``$$`` is a literal dollar sign. References to groups that do not exist
    expand to an empty string.
    """

    regex = re.compile(pattern)

    def expand(match: re.Match) -> str:
        def group(ref: re.Match) -> str:
            if ref.group(1):
                return "$"
            key = ref.group(2) or ref.group(3)
            try:
                value = match.group(int(key) if key.isascii() and key.isdigit() else key)
            except IndexError:
                return ""
            return value or ""

        return _GROUP_REF.sub(group, repl)

    return regex.sub(expand, text)


def humanize_duration(v: float) -> str:
    """Render a number of seconds for people.

    >>> humanize_duration(90061)
    '1d 1h 1m 1s'
    >>> humanize_duration(0.0001)
    '100us'
    """

    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "+Inf" if v > 0 else "-Inf"
    if v == 0:
        return "%.4gs" % v
    if abs(v) >= 1:
        sign = ""
        if v < 0:
            sign = "-"
            v = -v
        whole = int(v)
        seconds = whole % 60
        minutes = (whole // 60) % 60
        hours = (whole // 60 // 60) % 24
        days = whole // 60 // 60 // 24
        # Integer seconds from minutes up; 4 significant digits below that.
        if days != 0:
            return f"{sign}{days}d {hours}h {minutes}m {seconds}s"
        if hours != 0:
            return f"{sign}{hours}h {minutes}m {seconds}s"
        if minutes != 0:
            return f"{sign}{minutes}m {seconds}s"
        return "%s%.4gs" % (sign, v)

    prefix = ""
    for p in _SI_PREFIXES:
        if abs(v) >= 1:
            break
        prefix = p
        v *= 1000
    return "%.4g%ss" % (v, prefix)


def register_template_funcs(env: Environment, query_url: str) -> None:
    """Bind the helpers templates may call onto ``env``."""

    env.globals["since"] = since
    env.globals["alert_state_to_class"] = alert_state_to_class
    env.globals["rule_health_to_class"] = rule_health_to_class
    env.globals["query_url"] = lambda: query_url
    env.globals["re_replace_all"] = re_replace_all
    env.globals["humanize_duration"] = humanize_duration
    env.filters["humanize_duration"] = humanize_duration
