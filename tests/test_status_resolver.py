import pytest

from aha_cli.reconcile.status_resolver import (
    DEFAULT_LABEL_STATUSES,
    FirstMatchPolicy,
    SecondMatchPolicy,
    build_status_policy,
    effective_statuses,
    resolve_status,
)


def test_second_surviving_match_is_the_result():
    # Long-standing behaviour: the first mapped label is skipped.
    assert resolve_status(["Needs code review", "Ready"]) == "Ready to ship"


def test_single_match_resolves_to_none():
    assert resolve_status(["Needs code review"]) is None
    assert resolve_status([]) is None


def test_unmapped_labels_are_dropped_before_picking():
    labels = ["bug", "In development", "frontend", "Needs PM review"]
    assert effective_statuses(labels) == ["In development", "In PM review"]
    assert resolve_status(labels) == "In PM review"


def test_override_table_takes_precedence_over_defaults():
    overrides = {"Ready": "Shipped", "Needs QA": "In QA"}
    labels = ["Needs QA", "Ready"]
    assert effective_statuses(labels, overrides) == ["In QA", "Shipped"]
    assert resolve_status(labels, overrides) == "Shipped"


def test_first_match_policy_is_a_drop_in_alternative():
    labels = ["Needs code review", "Ready"]
    assert FirstMatchPolicy().resolve(labels) == "In code review"
    assert SecondMatchPolicy().resolve(labels) == "Ready to ship"
    assert resolve_status(labels, policy=FirstMatchPolicy()) == "In code review"


def test_build_status_policy_by_name():
    assert isinstance(build_status_policy("first_match"), FirstMatchPolicy)
    assert isinstance(build_status_policy(), SecondMatchPolicy)
    with pytest.raises(ValueError):
        build_status_policy("latest")


def test_default_table_contents():
    assert DEFAULT_LABEL_STATUSES == {
        "In development": "In development",
        "Needs code review": "In code review",
        "Needs PM review": "In PM review",
        "Ready": "Ready to ship",
    }


def test_empty_override_value_suppresses_the_default_mapping():
    assert effective_statuses(["Ready", "Needs code review"], {"Ready": ""}) == ["In code review"]
    assert resolve_status(["Ready", "Needs code review"], {"Ready": ""}) is None
