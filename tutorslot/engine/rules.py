"""
Structural booking rules that do not depend on any provider.

They are the cheapest checks and run first, before any provider calendar
or booking snapshot is consulted:

1. Lead time: the date must be on or after the minimum bookable date.
2. Weekdays only.
3. Ordering: the interval must end after it starts.
4. Business hours: the interval must fit inside exactly one block.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from tutorslot.config import settings
from tutorslot.engine.rejections import RejectionKind, RuleResult
from tutorslot.logging_context import get_request_logger
from tutorslot.schemas.schedule_schema import BusinessHoursPolicy, TimeInterval
from tutorslot.utils import is_weekend

logger = get_request_logger(__name__)


def min_bookable_date(today: date, lead_days: Optional[int] = None) -> date:
    """Earliest bookable date: ``lead_days`` ahead, rolled past any weekend.

    A Thursday gives Sunday plus the roll forward, i.e. the next Monday.
    """
    if lead_days is None:
        lead_days = settings.policy.lead_days
    earliest = today + timedelta(days=lead_days)
    while is_weekend(earliest):
        earliest += timedelta(days=1)
    return earliest


def check_structure(
    day: date,
    interval: TimeInterval,
    now: datetime,
    policy: Optional[BusinessHoursPolicy] = None,
    lead_days: Optional[int] = None,
) -> RuleResult:
    """Validate a proposed booking against the provider-independent rules.

    Pure function of its arguments: ``now`` comes from the caller's clock.
    """
    earliest = min_bookable_date(now.date(), lead_days)
    if day < earliest:
        return RuleResult.reject(
            RejectionKind.TOO_SOON,
            f"Selected date is too soon. Earliest available is {earliest:%B} {earliest.day}, {earliest.year}.",
        )

    if is_weekend(day):
        return RuleResult.reject(
            RejectionKind.WEEKEND,
            "Selected date falls on a weekend. Please choose a weekday.",
        )

    if not interval.is_ordered:
        return RuleResult.reject(
            RejectionKind.INVALID_ORDER,
            "End time must be later than start time.",
        )

    policy = policy or BusinessHoursPolicy.from_settings()
    if policy.block_for(interval) is None:
        logger.debug("Interval %s does not fit business hours %s", interval, policy.describe())
        return RuleResult.reject(
            RejectionKind.OUTSIDE_BUSINESS_HOURS,
            f"Sessions must stay within one block: {policy.describe()}.",
        )

    return RuleResult.ok()
