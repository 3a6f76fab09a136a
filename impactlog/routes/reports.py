from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..dependencies import get_report_service
from ..models.report_schema import ReportRequest
from ..models.stats_schema import ActivitiesPayload
from ..services.report import ActivityReport, ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/summary", response_model=ActivityReport)
async def report_summary(payload: ReportRequest, service: ReportService = Depends(get_report_service)):
    return service.build_report(payload.activities, payload.title, payload.months_back)


@router.post("/csv")
async def report_csv(payload: ActivitiesPayload, service: ReportService = Depends(get_report_service)):
    body = service.export_csv(payload.activities)
    filename = f"impactlog_activities_{service.clock().date().isoformat()}.csv"
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
