import logging
import uuid
from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from ..clock import Clock, system_clock
from ..registry import ActivityTypeRegistry, default_registry
from ..schemas import (
    ActivityCandidate,
    ActivityRecord,
    RequiredFieldsResult,
    ValidationVerdict,
)
from .calculator import ImpactCalculator
from .validator import SubmissionValidator, validate_required_fields

logger = logging.getLogger(__name__)

ReviewDecision = Literal["approve", "reject"]

_DECISION_STATUS = {"approve": "approved", "reject": "rejected"}


class ReviewError(ValueError):
    """Raised when a review cannot be applied to an activity."""


class SubmissionResult(BaseModel):
    required_fields: RequiredFieldsResult
    verdict: ValidationVerdict
    record: Optional[ActivityRecord] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None


class SubmissionService:
    """Turns a form submission into a pending activity record.

    The record is returned to the caller for storage; nothing is persisted
    here.
    """

    def __init__(self, registry: Optional[ActivityTypeRegistry] = None, clock: Clock = system_clock):
        registry = registry if registry is not None else default_registry()
        self.clock = clock
        self.calculator = ImpactCalculator(registry, clock)
        self.validator = SubmissionValidator(registry, clock)

    def prepare(
        self,
        candidate: ActivityCandidate,
        existing_activities: Iterable[ActivityRecord] = (),
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> SubmissionResult:
        required = validate_required_fields(candidate)
        verdict = self.validator.validate_activity(candidate, existing_activities)

        if not required.is_valid or not verdict.is_valid:
            logger.info(
                "Submission blocked for user %s: fields=%s errors=%s",
                user_id,
                sorted(required.field_errors),
                verdict.errors,
            )
            return SubmissionResult(required_fields=required, verdict=verdict)

        quantity = candidate.effective_quantity
        record = ActivityRecord(
            id=f"act-{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            user_name=user_name,
            activity_type=candidate.activity_type,
            description=candidate.description.strip(),
            quantity=candidate.quantity,
            hours=candidate.hours,
            activity_date=candidate.activity_date,
            created_at=self.clock(),
            location=candidate.location,
            photo_url=candidate.photo_url,
            status="pending",
            co2_saved=self.calculator.calculate_co2_saved(candidate.activity_type, quantity),
            impact_score=self.calculator.calculate_impact_score(candidate.activity_type, quantity),
            validation_flags=list(verdict.flags),
        )
        if verdict.requires_review:
            logger.info("Activity %s flagged for review: %s", record.id, verdict.flags)
        return SubmissionResult(required_fields=required, verdict=verdict, record=record)

    def apply_review(
        self,
        record: ActivityRecord,
        decision: str,
        reviewer_id: Optional[str] = None,
        comment: str = "",
    ) -> ActivityRecord:
        status = _DECISION_STATUS.get(decision)
        if status is None:
            logger.error("Unknown review decision %r for activity %s", decision, record.id)
            raise ReviewError(f"Unknown review decision: {decision}")
        if record.status != "pending":
            logger.error("Activity %s already reviewed (status=%s)", record.id, record.status)
            raise ReviewError(f"Activity {record.id} is already {record.status}")

        return record.model_copy(
            update={
                "status": status,
                "reviewer_id": reviewer_id,
                "reviewer_comment": comment,
                "reviewed_at": self.clock(),
            },
            deep=True,
        )
