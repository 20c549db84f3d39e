"""
Session analytics over a set of bookings.

Status counts, request outcome rates and delivered tutoring hours per
tutor, the figures shown on the admin reports page.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tutorslot.schemas.booking_schema import FINISHED_STATUSES, Booking, BookingStatus

logger = logging.getLogger(__name__)


@dataclass
class SessionMetrics:
    """Calculated metrics for a batch of bookings."""

    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)

    # Request outcomes
    confirmation_rate: float = 0.0
    decline_rate: float = 0.0
    auto_decline_candidates: int = 0

    # Delivery
    completion_rate: float = 0.0
    cancellation_rate: float = 0.0
    hours_by_provider: dict[str, float] = field(default_factory=dict)

    @property
    def total_hours(self) -> float:
        return sum(self.hours_by_provider.values())


class SessionMetricsCalculator:
    """Calculates session metrics from booking snapshots."""

    def calculate(self, bookings: Iterable[Booking]) -> SessionMetrics:
        items = list(bookings)
        metrics = SessionMetrics(total=len(items))
        if not items:
            return metrics

        for status in BookingStatus:
            metrics.by_status[status.value] = sum(1 for b in items if b.status == status)

        answered = [b for b in items if b.status != BookingStatus.PENDING]
        declined = metrics.by_status[BookingStatus.DECLINED.value]
        metrics.decline_rate = declined / max(len(answered), 1)
        metrics.confirmation_rate = (len(answered) - declined) / max(len(answered), 1)
        metrics.auto_decline_candidates = metrics.by_status[BookingStatus.PENDING.value]

        accepted = len(answered) - declined
        finished = sum(1 for b in items if b.status in FINISHED_STATUSES)
        metrics.completion_rate = finished / max(accepted, 1)
        metrics.cancellation_rate = metrics.by_status[BookingStatus.CANCELLED.value] / max(accepted, 1)

        for booking in items:
            if booking.status not in FINISHED_STATUSES:
                continue
            hours = booking.interval.duration_minutes / 60
            metrics.hours_by_provider[booking.provider_id] = (
                metrics.hours_by_provider.get(booking.provider_id, 0.0) + hours
            )

        logger.debug("Calculated metrics over %d booking(s)", metrics.total)
        return metrics

    def top_providers(self, metrics: SessionMetrics, limit: int = 3) -> list[tuple[str, float]]:
        """Providers ranked by delivered hours."""
        ranked = sorted(metrics.hours_by_provider.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]

    def format_report(self, metrics: SessionMetrics) -> str:
        """Format metrics into a human-readable report."""
        lines = [
            "=" * 60,
            "TUTORING SESSION REPORT",
            "=" * 60,
            "",
            "VOLUME",
            f"  Total bookings:         {metrics.total}",
        ]
        for status, count in metrics.by_status.items():
            lines.append(f"  {status.replace('_', ' ').title() + ':':<24}{count}")
        lines += [
            "",
            "REQUEST OUTCOMES",
            f"  Confirmation rate:      {metrics.confirmation_rate:.1%}",
            f"  Decline rate:           {metrics.decline_rate:.1%}",
            f"  Still pending:          {metrics.auto_decline_candidates}",
            "",
            "DELIVERY",
            f"  Completion rate:        {metrics.completion_rate:.1%}",
            f"  Cancellation rate:      {metrics.cancellation_rate:.1%}",
            f"  Total hours:            {metrics.total_hours:.1f}",
        ]
        for provider_id, hours in self.top_providers(metrics):
            lines.append(f"    {provider_id}: {hours:.1f} hrs")
        lines.append("=" * 60)
        return "\n".join(lines)
