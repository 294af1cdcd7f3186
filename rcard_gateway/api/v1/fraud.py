"""POST /v1/fraud-reports - fraud report intake"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from rcard_gateway.api.dependencies import get_client_ip, get_current_user_id, get_request_id
from rcard_gateway.api.v1.schemas import FraudReportRequest, FraudReportResponse
from rcard_gateway.domain.fraud import submit_fraud_report
from rcard_gateway.infrastructure.database.repositories import FraudReportRepository
from rcard_gateway.infrastructure.database.session import get_db, unit_of_work

router = APIRouter()


@router.post("/fraud-reports", response_model=FraudReportResponse, status_code=201)
def create_fraud_report(
    body: FraudReportRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        report = submit_fraud_report(
            FraudReportRepository(db),
            user_id,
            body.description,
            report_type=body.type,
            ip_address=get_client_ip(request),
        )

    return FraudReportResponse(report_id=report.id, status=report.status)
