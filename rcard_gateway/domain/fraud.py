"""Fraud report intake (submission only, no detection)"""

import logging
import uuid
from datetime import datetime
from typing import Callable

from rcard_gateway.domain.accounts import sanitize_text
from rcard_gateway.domain.exceptions import ValidationError
from rcard_gateway.domain.models import FraudReport
from rcard_gateway.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


def submit_fraud_report(
    reports,
    user_id: int,
    description: str,
    report_type: str = "general",
    ip_address: str = "0.0.0.0",
    now: Callable[[], datetime] = utc_now,
) -> FraudReport:
    description = sanitize_text(description)
    if not description:
        raise ValidationError("Description required")

    report = FraudReport(
        id=f"fraud_{uuid.uuid4().hex[:13]}",
        user_id=user_id,
        type=sanitize_text(report_type) or "general",
        description=description,
        ip_address=ip_address,
        created_at=now(),
    )
    reports.save_report(report)

    logger.warning("Fraud report created", extra={"report_id": report.id, "user_id": user_id})
    return report
