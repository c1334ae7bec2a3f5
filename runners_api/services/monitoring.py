"""Client monitoring reports. Tracking is logging only; nothing is persisted."""

import logging
import uuid

from runners_api.models import User
from runners_api.schemas.monitoring import ActivityReport, ClientErrorReport, PerformanceReport

logger = logging.getLogger(__name__)

_SEVERITY_LEVELS = {
    "low": logging.INFO,
    "medium": logging.WARNING,
    "high": logging.WARNING,
    "critical": logging.ERROR,
}


def _reference() -> str:
    return uuid.uuid4().hex[:12]


def record_client_error(report: ClientErrorReport, user: User | None) -> str:
    reference = _reference()
    logger.log(
        _SEVERITY_LEVELS.get(report.severity, logging.WARNING),
        "Client error reported: %s",
        report.message,
        extra={
            "reference": reference,
            "severity": report.severity,
            "url": report.url,
            "user_agent": report.user_agent,
            "user_id": user.id if user else None,
            "context_keys": sorted(report.context),
            "has_stack": bool(report.stack),
        },
    )
    return reference


def record_performance(report: PerformanceReport, user: User) -> str:
    reference = _reference()
    logger.info(
        "Performance metric: %s took %.1fms",
        report.operation_name,
        report.duration_ms,
        extra={
            "reference": reference,
            "operation": report.operation_name,
            "duration_ms": report.duration_ms,
            "success": report.success,
            "metrics": report.metrics,
            "user_id": user.id,
        },
    )
    return reference


def record_activity(report: ActivityReport, user: User) -> str:
    reference = _reference()
    logger.info(
        "User activity: %s",
        report.activity_type,
        extra={"reference": reference, "activity_type": report.activity_type, "details": report.details, "user_id": user.id},
    )
    return reference
