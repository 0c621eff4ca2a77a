import math
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from jinja2 import Environment

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ruleui.rules import AlertState, RuleHealth  # noqa: E402
from ruleui.template_funcs import (alert_state_to_class, humanize_duration,  # noqa: E402
                                   re_replace_all, register_template_funcs,
                                   rule_health_to_class, since)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0.0, "0s"),
        (90061.0, "1d 1h 1m 1s"),
        (172800.5, "2d 0h 0m 0s"),
        (3600.0, "1h 0m 0s"),
        (3725.9, "1h 2m 5s"),
        (-65.0, "-1m 5s"),
        (3.5, "3.5s"),
        (1.23456, "1.235s"),
        (-1.5, "-1.5s"),
        (0.5, "500ms"),
        (0.0001, "100us"),
        (-0.002, "-2ms"),
        (1.5e-9, "1.5ns"),
    ],
)
def test_humanize_duration(seconds, expected):
    assert humanize_duration(seconds) == expected


def test_humanize_duration_special_values_have_no_unit():
    assert humanize_duration(math.nan) == "NaN"
    assert humanize_duration(math.inf) == "+Inf"
    assert humanize_duration(-math.inf) == "-Inf"


def test_humanize_duration_keeps_last_prefix_for_tiny_values():
    assert humanize_duration(1e-30) == "1e-06ys"


def test_alert_state_to_class():
    assert alert_state_to_class(AlertState.INACTIVE) == "success"
    assert alert_state_to_class(AlertState.PENDING) == "warning"
    assert alert_state_to_class(AlertState.FIRING) == "danger"


def test_alert_state_to_class_rejects_unknown_state():
    with pytest.raises(ValueError, match="unknown alert state"):
        alert_state_to_class(7)


def test_rule_health_to_class():
    assert rule_health_to_class(RuleHealth.UNKNOWN) == "warning"
    assert rule_health_to_class(RuleHealth.GOOD) == "success"
    assert rule_health_to_class(RuleHealth.BAD) == "danger"


def test_re_replace_all_expands_group_references():
    assert re_replace_all("(a)(b)", "$2$1", "abab") == "baba"
    assert re_replace_all(r"(?P<word>\w+)", "${word}!", "hi there") == "hi! there!"
    assert re_replace_all("x", "$$", "axb") == "a$b"


def test_re_replace_all_missing_group_is_empty():
    assert re_replace_all("(a)", "[$\u00b2]", "cat") == "c[]t"
    assert re_replace_all("(a)", "[$nope]", "cat") == "c[]t"


def test_re_replace_all_non_ascii_digits_are_names():
    assert re_replace_all("(a)", "[$\u00b2]", "cat") == "c[]t"


def test_since_truncates_to_milliseconds():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    now = start + timedelta(seconds=5, microseconds=123456)
    assert since(start, now=now) == timedelta(seconds=5, milliseconds=123)


def test_since_treats_naive_times_as_utc():
    start = datetime(2024, 1, 1, 12, 0, 0)
    now = datetime(2024, 1, 1, 12, 1, 0, tzinfo=timezone.utc)
    assert since(start, now=now) == timedelta(minutes=1)


def test_register_template_funcs_binds_named_helpers():
    env = Environment()
    register_template_funcs(env, "http://query:9090")

    rendered = env.from_string(
        "{{ query_url() }}|{{ humanize_duration(65) }}|{{ 0.25 | humanize_duration }}"
    ).render()
    assert rendered == "http://query:9090|1m 5s|250ms"
    assert set(env.globals) >= {
        "since",
        "alert_state_to_class",
        "rule_health_to_class",
        "query_url",
        "re_replace_all",
        "humanize_duration",
    }
