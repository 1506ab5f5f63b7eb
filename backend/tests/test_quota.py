"""Tests for plan tier quotas."""

import pytest

from edtech.services.quota import (
    MB,
    PLAN_LIMITS,
    DenialReason,
    PlanLimits,
    check_document_upload,
    limits_for,
)


@pytest.mark.parametrize("plan", ["free", "pro", "campus"])
def test_uploads_allowed_until_limit(plan):
    """Every upload up to the plan's document limit is allowed."""
    limits = PLAN_LIMITS[plan]
    for current_count in range(min(limits.max_docs, 12)):
        decision = check_document_upload(plan, current_count, 1024)
        assert decision.allowed, f"{plan}: upload #{current_count + 1} denied"
        assert decision.reason is None


@pytest.mark.parametrize("plan", ["free", "pro", "campus"])
def test_upload_over_limit_denied_for_count(plan):
    """One past the limit is a count denial, even for a tiny file."""
    limits = PLAN_LIMITS[plan]
    decision = check_document_upload(plan, limits.max_docs, 1)
    assert not decision.allowed
    assert decision.reason is DenialReason.COUNT_EXCEEDED


def test_count_checked_before_size():
    decision = check_document_upload("free", 1, 500 * MB)
    assert decision.reason is DenialReason.COUNT_EXCEEDED


@pytest.mark.parametrize(
    ("plan", "size", "allowed"),
    [
        ("free", 5 * MB, True),
        ("free", 5 * MB + 1, False),
        ("pro", 20 * MB, True),
        ("pro", 20 * MB + 1, False),
        ("campus", 50 * MB, True),
        ("campus", 50 * MB + 1, False),
    ],
)
def test_size_limit(plan, size, allowed):
    decision = check_document_upload(plan, 0, size)
    assert decision.allowed is allowed
    if not allowed:
        assert decision.reason is DenialReason.SIZE_EXCEEDED


def test_plan_limits_table():
    assert (PLAN_LIMITS["free"].max_docs, PLAN_LIMITS["free"].max_size_bytes) == (1, 5 * MB)
    assert (PLAN_LIMITS["pro"].max_docs, PLAN_LIMITS["pro"].max_size_bytes) == (10, 20 * MB)
    assert (PLAN_LIMITS["campus"].max_docs, PLAN_LIMITS["campus"].max_size_bytes) == (999, 50 * MB)


def test_custom_limits_table():
    table = {"free": PlanLimits(max_docs=3, max_size_bytes=10)}
    assert check_document_upload("free", 2, 10, table).allowed
    assert not check_document_upload("free", 3, 10, table).allowed


def test_unknown_plan_gets_free_limits():
    assert limits_for("enterprise") == PLAN_LIMITS["free"]


def test_denial_messages():
    count = check_document_upload("free", 1, 1)
    size = check_document_upload("free", 0, 6 * MB)
    assert "Upgrade" in count.message
    assert "too large" in size.message
