from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_calculator, get_registry, get_submission_service, get_validator
from ..models.activity_schema import (
    CalculateRequest,
    CalculateResponse,
    ReviewRequest,
    SubmitActivityRequest,
    ValidateActivityRequest,
)
from ..registry import ActivityTypeDefinition, ActivityTypeRegistry
from ..schemas import ActivityCandidate, ActivityRecord, RequiredFieldsResult, ValidationVerdict
from ..services.calculator import ImpactCalculator, format_co2
from ..services.submission import ReviewError, SubmissionResult, SubmissionService
from ..services.validator import SubmissionValidator, validate_required_fields

router = APIRouter(tags=["activities"])


@router.get("/activity-types", response_model=List[ActivityTypeDefinition])
async def list_activity_types(registry: ActivityTypeRegistry = Depends(get_registry)):
    return list(registry.values())


@router.post("/activities/validate", response_model=ValidationVerdict)
async def validate(
    payload: ValidateActivityRequest, validator: SubmissionValidator = Depends(get_validator)
) -> ValidationVerdict:
    return validator.validate_activity(payload.candidate, payload.existing_activities)


@router.post("/activities/required-fields", response_model=RequiredFieldsResult)
async def required_fields(payload: ActivityCandidate) -> RequiredFieldsResult:
    return validate_required_fields(payload)


@router.post("/activities/calculate", response_model=CalculateResponse)
async def calculate(
    payload: CalculateRequest, calculator: ImpactCalculator = Depends(get_calculator)
) -> CalculateResponse:
    co2 = calculator.calculate_co2_saved(payload.activity_type, payload.quantity)
    return CalculateResponse(
        activity_type=payload.activity_type,
        quantity=payload.quantity,
        co2_saved=co2,
        impact_score=calculator.calculate_impact_score(payload.activity_type, payload.quantity),
        co2_display=format_co2(co2),
    )


@router.post("/activities/submit", response_model=SubmissionResult)
async def submit(
    payload: SubmitActivityRequest, service: SubmissionService = Depends(get_submission_service)
) -> SubmissionResult:
    return service.prepare(
        payload.candidate,
        payload.existing_activities,
        user_id=payload.user_id,
        user_name=payload.user_name,
    )


@router.post("/activities/review", response_model=ActivityRecord)
async def review(
    payload: ReviewRequest, service: SubmissionService = Depends(get_submission_service)
) -> ActivityRecord:
    try:
        return service.apply_review(payload.record, payload.decision, payload.reviewer_id, payload.comment)
    except ReviewError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
