from tutorslot.analytics.metrics import SessionMetrics, SessionMetricsCalculator

__all__ = ["SessionMetrics", "SessionMetricsCalculator"]
