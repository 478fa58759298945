"""Report cards teachers submit for their students."""

from dataclasses import dataclass
from datetime import datetime, timezone

from .errors import ValidationError

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class ReportCard:
    """Created once per submission; there is no update path."""

    id: str
    student_id: str
    teacher_id: str
    rating: int
    comments: str | None = None
    date: datetime | None = None


def validate_report_card_input(student_id, teacher_id, rating) -> None:
    """
    Check a submission before anything is persisted.

    Raises:
        ValidationError: missing ids, or a rating that is not an integer in [1, 5]
    """
    if not student_id:
        raise ValidationError("Student id is required", field="student_id")
    if not teacher_id:
        raise ValidationError("Teacher id is required", field="teacher_id")
    # bool is an int subclass; True must not count as a rating of 1
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"Rating must be an integer, got {rating!r}", field="rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}",
            field="rating",
        )


def build_report_card(
    report_card_id: str,
    student_id: str,
    teacher_id: str,
    rating: int,
    comments: str | None = None,
) -> ReportCard:
    """Validate the input and build the record to persist."""
    validate_report_card_input(student_id, teacher_id, rating)
    return ReportCard(
        id=report_card_id,
        student_id=student_id,
        teacher_id=teacher_id,
        rating=rating,
        comments=comments or None,
        date=datetime.now(timezone.utc),
    )
