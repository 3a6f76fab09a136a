import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..clock import Clock, system_clock
from ..registry import DEFAULT_DAILY_CEILING, ActivityTypeRegistry, default_registry
from ..schemas import (
    ActivityCandidate,
    ActivityRecord,
    RequiredFieldsResult,
    Severity,
    ValidationVerdict,
)

logger = logging.getLogger(__name__)

MISSING_DESCRIPTION = "missing_description"
SHORT_DESCRIPTION = "short_description"
MISSING_PHOTO = "missing_photo"
EXCESSIVE_QUANTITY = "excessive_quantity"
DUPLICATE_SUBMISSION = "duplicate_submission"
FUTURE_DATE = "future_date"
SUSPICIOUS_PATTERN = "suspicious_pattern"
MISSING_LOCATION = "missing_location_for_outdoor"

ERROR_FLAGS = frozenset({MISSING_DESCRIPTION, FUTURE_DATE})
WARNING_FLAGS = frozenset({
    SHORT_DESCRIPTION,
    MISSING_PHOTO,
    EXCESSIVE_QUANTITY,
    DUPLICATE_SUBMISSION,
    SUSPICIOUS_PATTERN,
    MISSING_LOCATION,
})
REVIEW_FLAGS = frozenset({EXCESSIVE_QUANTITY, SUSPICIOUS_PATTERN, DUPLICATE_SUBMISSION})

OUTDOOR_ACTIVITIES = frozenset({"tree_planting", "volunteering", "cycling", "public_transport"})

FLAG_DESCRIPTIONS = {
    MISSING_DESCRIPTION: "Missing description",
    SHORT_DESCRIPTION: "Description too short",
    MISSING_PHOTO: "No photo proof",
    EXCESSIVE_QUANTITY: "Unusually high quantity",
    DUPLICATE_SUBMISSION: "Possible duplicate",
    FUTURE_DATE: "Future date not allowed",
    SUSPICIOUS_PATTERN: "Unusual submission pattern",
    MISSING_LOCATION: "Location recommended",
}


def get_flag_severity(flag: str) -> Severity:
    if flag in ERROR_FLAGS:
        return "error"
    if flag in WARNING_FLAGS:
        return "warning"
    return "info"


def get_flag_description(flag: str) -> str:
    return FLAG_DESCRIPTIONS.get(flag, flag)


def _blank(text: Optional[str]) -> bool:
    return not text or not text.strip()


def validate_required_fields(candidate: ActivityCandidate) -> RequiredFieldsResult:
    """Inline form pre-check, keyed by field name."""
    errors = {}

    if not candidate.activity_type:
        errors["activity_type"] = "Please select an activity type"

    if _blank(candidate.description):
        errors["description"] = "Description is required"

    if candidate.effective_quantity <= 0:
        errors["quantity"] = "Please enter a valid quantity/hours"

    if candidate.activity_date is None:
        errors["activity_date"] = "Please select a date"

    return RequiredFieldsResult(is_valid=not errors, field_errors=errors)


class SubmissionValidator:
    """Screens a candidate activity against the submitter's history.

    Every check runs; blocking problems land in ``errors``, advisory ones in
    ``warnings``, and each triggered check contributes its flag.
    """

    min_description_length = 10
    frequency_window = timedelta(days=7)
    frequency_threshold = 20

    def __init__(self, registry: Optional[ActivityTypeRegistry] = None, clock: Clock = system_clock):
        self.registry = registry if registry is not None else default_registry()
        self.clock = clock

    def validate_activity(
        self,
        candidate: ActivityCandidate,
        existing_activities: Iterable[ActivityRecord] = (),
    ) -> ValidationVerdict:
        existing = list(existing_activities)
        now = self.clock()
        flags: List[str] = []
        warnings: List[str] = []
        errors: List[str] = []

        if _blank(candidate.description):
            flags.append(MISSING_DESCRIPTION)
            errors.append("Description is required")
        elif len(candidate.description.strip()) < self.min_description_length:
            flags.append(SHORT_DESCRIPTION)
            warnings.append("Description is very short. Please provide more details.")

        if not candidate.photo_url and not candidate.photo:
            flags.append(MISSING_PHOTO)
            warnings.append("Consider adding a photo as proof of your activity.")

        quantity = candidate.effective_quantity
        if _blank(candidate.activity_type):
            ceiling = DEFAULT_DAILY_CEILING
        else:
            ceiling = self.registry.daily_ceiling(candidate.activity_type)
        if quantity > ceiling:
            flags.append(EXCESSIVE_QUANTITY)
            warnings.append(
                f"The quantity ({quantity:g}) seems unusually high for a single day. Please verify."
            )

        activity_date = candidate.activity_date
        if activity_date is not None:
            end_of_today = datetime.combine(now.date(), datetime.max.time())
            if activity_date > end_of_today:
                flags.append(FUTURE_DATE)
                errors.append("Activity date cannot be in the future.")

            if self._has_same_day(candidate, existing):
                flags.append(DUPLICATE_SUBMISSION)
                warnings.append("You already have a similar activity logged for this date.")

        if self._recent_count(existing, now) >= self.frequency_threshold:
            flags.append(SUSPICIOUS_PATTERN)
            warnings.append("High submission frequency detected. Manager review recommended.")

        if candidate.activity_type in OUTDOOR_ACTIVITIES and not candidate.location:
            flags.append(MISSING_LOCATION)
            warnings.append("Location is recommended for outdoor activities.")

        verdict = ValidationVerdict(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            flags=flags,
            requires_review=any(flag in REVIEW_FLAGS for flag in flags),
        )
        logger.debug("Validated %s submission: flags=%s", candidate.activity_type, flags)
        return verdict

    @staticmethod
    def _has_same_day(candidate: ActivityCandidate, existing: List[ActivityRecord]) -> bool:
        day = candidate.activity_date.date()
        return any(
            a.activity_type == candidate.activity_type
            and a.activity_date is not None
            and a.activity_date.date() == day
            for a in existing
        )

    def _recent_count(self, existing: List[ActivityRecord], now: datetime) -> int:
        cutoff = now - self.frequency_window
        return sum(1 for a in existing if a.activity_date is not None and a.activity_date >= cutoff)


_default = SubmissionValidator()


def validate_activity(
    candidate: ActivityCandidate,
    existing_activities: Iterable[ActivityRecord] = (),
) -> ValidationVerdict:
    return _default.validate_activity(candidate, existing_activities)
