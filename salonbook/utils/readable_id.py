import datetime

from salonbook.errors import ValidationError


def format_readable_id(
    salon_id: str, appointment_number: int, reference_date: datetime.date
) -> str:
    """
    Build the human-facing appointment code, e.g. ABC-240305-007.

    prefix  first three characters of the salon id, upper-cased
    date    reference_date as yyMMdd
    number  appointment_number, zero-padded to at least three digits
    """
    if not salon_id or len(salon_id) < 3:
        raise ValidationError(
            "salon_id must be at least 3 characters to build a readable id"
        )
    prefix = salon_id[:3].upper()
    date_part = reference_date.strftime("%y%m%d")
    return f"{prefix}-{date_part}-{appointment_number:03d}"
