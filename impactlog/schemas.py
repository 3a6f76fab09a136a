import logging
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

logger = logging.getLogger(__name__)

Severity = Literal["error", "warning", "info"]


def _date_only_to_midnight(value: Any) -> Any:
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str) and len(value) == 10:
        return f"{value}T00:00:00"
    if value == "":
        return None
    return value


def _to_local_naive(value: Any) -> Any:
    # Stored rows mix "2025-01-28" and "2025-01-28T10:00:00Z"; compare everything
    # as naive local time.
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


_FLOAT = TypeAdapter(float)
_DATETIME = TypeAdapter(datetime)


def _or_none(adapter: TypeAdapter, value: Any, info: ValidationInfo, raw: Any = None) -> Any:
    if value is None:
        return None
    try:
        return adapter.validate_python(value)
    except ValidationError:
        logger.warning(
            "Unreadable %s %r on stored activity, treating as missing",
            info.field_name,
            value if raw is None else raw,
        )
        return None


class ActivityRecord(BaseModel):
    """A stored activity submission.

    Every field is optional so that partially corrupt rows still load; the
    calculator substitutes neutral values for anything missing.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    activity_type: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    hours: Optional[float] = None
    activity_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    location: Optional[str] = None
    photo_url: Optional[str] = None
    status: Optional[str] = Field(default="pending", description="pending | approved | rejected")
    co2_saved: Optional[float] = None
    impact_score: Optional[float] = None
    validation_flags: List[str] = Field(default_factory=list)
    reviewer_id: Optional[str] = None
    reviewer_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @field_validator("activity_date", "created_at", "reviewed_at", mode="before")
    @classmethod
    def _lenient_dates(cls, value, info: ValidationInfo):
        return _or_none(_DATETIME, _date_only_to_midnight(value), info, raw=value)

    @field_validator("activity_date", "created_at", "reviewed_at", mode="after")
    @classmethod
    def _normalize_datetime(cls, value):
        return _to_local_naive(value)

    @field_validator("quantity", "hours", "co2_saved", "impact_score", mode="before")
    @classmethod
    def _lenient_numbers(cls, value, info: ValidationInfo):
        return _or_none(_FLOAT, value, info)

    @field_validator("status", mode="before")
    @classmethod
    def _lenient_status(cls, value):
        if value is not None and not isinstance(value, str):
            logger.warning("Unreadable status %r on stored activity, treating as missing", value)
            return None
        return value

    @field_validator("validation_flags", mode="before")
    @classmethod
    def _lenient_flags(cls, value):
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Unreadable validation_flags %r on stored activity, dropping", value)
            return []
        return [str(flag) for flag in value]

    @property
    def effective_quantity(self) -> float:
        return self.quantity or self.hours or 0.0

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"

    @property
    def effective_date(self) -> Optional[datetime]:
        return self.activity_date or self.created_at


class ActivityCandidate(BaseModel):
    """Activity as entered in the submission form, before validation."""

    activity_type: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    hours: Optional[float] = None
    activity_date: Optional[datetime] = None
    location: Optional[str] = None
    photo_url: Optional[str] = None
    photo: bool = Field(default=False, description="A photo is staged but not yet uploaded")

    @field_validator("activity_date", mode="before")
    @classmethod
    def _accept_plain_dates(cls, value):
        return _date_only_to_midnight(value)

    @field_validator("activity_date", mode="after")
    @classmethod
    def _normalize_datetime(cls, value):
        return _to_local_naive(value)

    @property
    def effective_quantity(self) -> float:
        return self.quantity or self.hours or 0.0


class ValidationVerdict(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    flags: List[str] = Field(default_factory=list)
    requires_review: bool = False


class RequiredFieldsResult(BaseModel):
    is_valid: bool
    field_errors: Dict[str, str] = Field(default_factory=dict)


class TypeStats(BaseModel):
    count: int = 0
    total_quantity: float = 0.0
    total_co2: float = 0.0
    total_impact: float = 0.0


class MonthlyTrendPoint(BaseModel):
    month: str = Field(..., description="Short English month name, e.g. Jan")
    year: int
    activity_count: int = 0
    co2_saved: float = 0.0
    impact_score: float = 0.0
    csr_hours: float = 0.0


class ImpactSummary(BaseModel):
    total_co2_saved: float = 0.0
    total_impact_score: float = 0.0
    total_csr_hours: float = 0.0
    approved_count: int = 0
    pending_count: int = 0
    rejected_count: int = 0
