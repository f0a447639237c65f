r"""Unit tests for configuration defaults and environment loading."""

from __future__ import annotations

import pytest

from agentretry.classify import always_retry, default_should_retry
from agentretry.config import (
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_TIMEOUT,
    RETRY_STATUS_CODES,
    load_policy,
)
from agentretry.exceptions import ConfigurationError


def test_default_constants() -> None:
    assert DEFAULT_MAX_ATTEMPTS == 3
    assert DEFAULT_INITIAL_BACKOFF == 1.0
    assert DEFAULT_MAX_BACKOFF == 30.0
    assert DEFAULT_TIMEOUT == 10.0
    assert RETRY_STATUS_CODES == (429, 500, 502, 503, 504)


#################################
#     Tests for load_policy     #
#################################


def test_load_policy_empty_environment() -> None:
    policy = load_policy({})
    assert policy.max_attempts == DEFAULT_MAX_ATTEMPTS
    assert policy.initial_backoff == DEFAULT_INITIAL_BACKOFF
    assert policy.max_backoff == DEFAULT_MAX_BACKOFF
    assert policy.should_retry is default_should_retry


def test_load_policy_all_values() -> None:
    policy = load_policy(
        {
            "AGENTRETRY_MAX_ATTEMPTS": "5",
            "AGENTRETRY_INITIAL_BACKOFF": "0.25",
            "AGENTRETRY_MAX_BACKOFF": " 4 ",
        }
    )
    assert policy.max_attempts == 5
    assert policy.initial_backoff == 0.25
    assert policy.max_backoff == 4.0


def test_load_policy_blank_value_uses_default() -> None:
    assert load_policy({"AGENTRETRY_MAX_ATTEMPTS": "  "}).max_attempts == DEFAULT_MAX_ATTEMPTS


def test_load_policy_custom_prefix_and_predicate() -> None:
    policy = load_policy(
        {"GRADING_MAX_ATTEMPTS": "2", "AGENTRETRY_MAX_ATTEMPTS": "9"},
        prefix="GRADING_",
        should_retry=always_retry,
    )
    assert policy.max_attempts == 2
    assert policy.should_retry is always_retry


def test_load_policy_reads_os_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AGENTRETRY_MAX_ATTEMPTS", "7")
    assert load_policy().max_attempts == 7


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("AGENTRETRY_MAX_ATTEMPTS", "three"),
        ("AGENTRETRY_MAX_ATTEMPTS", "2.5"),
        ("AGENTRETRY_INITIAL_BACKOFF", "1s"),
        ("AGENTRETRY_MAX_BACKOFF", "forever"),
    ],
)
def test_load_policy_unparsable_value(key: str, value: str) -> None:
    with pytest.raises(ConfigurationError, match=r"invalid value for") as exc_info:
        load_policy({key: value})
    assert exc_info.value.config_key == key


def test_load_policy_invalid_policy() -> None:
    with pytest.raises(ConfigurationError, match=r"max_attempts must be >= 1"):
        load_policy({"AGENTRETRY_MAX_ATTEMPTS": "0"})


@pytest.mark.parametrize(
    ("key", "value", "config_key"),
    [
        ("AGENTRETRY_INITIAL_BACKOFF", "nan", "initial_backoff"),
        ("AGENTRETRY_INITIAL_BACKOFF", "inf", "initial_backoff"),
        ("AGENTRETRY_MAX_BACKOFF", "infinity", "max_backoff"),
        ("AGENTRETRY_MAX_BACKOFF", "NaN", "max_backoff"),
    ],
)
def test_load_policy_non_finite_backoff(key: str, value: str, config_key: str) -> None:
    with pytest.raises(ConfigurationError, match=r"must be finite") as exc_info:
        load_policy({key: value})
    assert exc_info.value.config_key == config_key
