"""Calendar roll-forward for installment, contribution and premium schedules."""

from datetime import date

from dateutil.relativedelta import relativedelta

from services.exceptions import ValidationError

# Calendar offset of a single period, keyed by frequency name.
PERIOD_OFFSETS = {
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "half_yearly": relativedelta(months=6),
    "yearly": relativedelta(years=1),
}

CUSTOM = "custom"


def validate_frequency(
    frequency: str,
    custom_days: int | None,
    allowed: tuple[str, ...],
    field: str = "frequency",
) -> None:
    """Raise ValidationError unless ``frequency`` is allowed and complete.

    A custom frequency needs a positive ``custom_days``.
    """
    if frequency not in allowed:
        raise ValidationError(
            f"{field} must be one of {', '.join(allowed)}, got {frequency!r}",
            field=field,
        )
    if frequency == CUSTOM and (custom_days is None or custom_days <= 0):
        raise ValidationError(
            "custom_frequency_days must be a positive number of days for a custom frequency",
            field="custom_frequency_days",
        )


def advance(start: date, frequency: str, count: int = 1, custom_days: int | None = None) -> date:
    """Return ``start`` moved forward by ``count`` periods of ``frequency``.

    The offset is always applied to ``start`` in one step, so month-end
    dates clamp only for the target month: Jan 31 + 1 month is Feb 28 (or 29),
    Jan 31 + 2 months is Mar 31.

    Raises:
        ValidationError: unknown frequency, or custom frequency without days
    """
    if count < 0:
        raise ValidationError(f"Cannot advance a schedule by {count} periods", field="count")

    if frequency == CUSTOM:
        if custom_days is None or custom_days <= 0:
            raise ValidationError(
                "custom_frequency_days must be a positive number of days for a custom frequency",
                field="custom_frequency_days",
            )
        return start + relativedelta(days=count * custom_days)

    offset = PERIOD_OFFSETS.get(frequency)
    if offset is None:
        raise ValidationError(f"Unknown frequency: {frequency!r}", field="frequency")
    return start + offset * count
