"""Plan tier quotas for stored documents."""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from edtech.schemas.user import PlanType

MB = 1024 * 1024


@dataclass(frozen=True)
class PlanLimits:
    max_docs: int
    max_size_bytes: int
    label: str = ""


class DenialReason(str, Enum):
    COUNT_EXCEEDED = "count_exceeded"
    SIZE_EXCEEDED = "size_exceeded"


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    reason: DenialReason | None = None

    @property
    def message(self) -> str:
        if self.reason is DenialReason.COUNT_EXCEEDED:
            return "Plan limit reached. Upgrade your plan to store more documents."
        if self.reason is DenialReason.SIZE_EXCEEDED:
            return "File too large for your plan. Pick a smaller file or upgrade."
        return ""


ALLOW = QuotaDecision(allowed=True)

PLAN_LIMITS: Mapping[str, PlanLimits] = {
    "free": PlanLimits(max_docs=1, max_size_bytes=5 * MB, label="Free Tier"),
    "pro": PlanLimits(max_docs=10, max_size_bytes=20 * MB, label="Educator Pro"),
    "campus": PlanLimits(max_docs=999, max_size_bytes=50 * MB, label="Campus Plan"),
}


def limits_for(plan: PlanType, table: Mapping[str, PlanLimits] = PLAN_LIMITS) -> PlanLimits:
    """Look up the limits for a plan tier. Unknown tiers get the free limits."""
    return table.get(plan, table["free"])


def check_document_upload(
    plan: PlanType,
    current_count: int,
    file_size: int,
    table: Mapping[str, PlanLimits] = PLAN_LIMITS,
) -> QuotaDecision:
    """
    Decide whether one more document of `file_size` bytes may be stored.

    The count is checked before the size, so a user at their document
    limit is told to upgrade rather than to pick a smaller file.
    """
    limits = limits_for(plan, table)
    if current_count >= limits.max_docs:
        return QuotaDecision(allowed=False, reason=DenialReason.COUNT_EXCEEDED)
    if file_size > limits.max_size_bytes:
        return QuotaDecision(allowed=False, reason=DenialReason.SIZE_EXCEEDED)
    return ALLOW
