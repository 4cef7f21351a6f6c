from datetime import datetime, date, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from frota.utils.error_handler import ValidationError


def utcnow():
    """Naive UTC timestamp, matching how the database columns store time."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value, field='timestamp'):
    """Parse an ISO 8601 timestamp into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        # fromisoformat only learned the 'Z' suffix in Python 3.11
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f'Invalid {field}: {value!r}')
    else:
        raise ValidationError(f'{field} is required')

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value, field='date'):
    """Parse a ``YYYY-MM-DD`` query parameter."""
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}: {value!r} (expected YYYY-MM-DD)')


def parse_positive_decimal(value, field, max_digits=None, places=None):
    """Parse a strictly positive decimal amount.

    ``max_digits`` and ``places`` mirror the ``Numeric(precision, scale)``
    column the amount is stored in: extra decimal places are rounded half up
    and values the column cannot hold are rejected.
    """
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'{field} is required')
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f'Invalid {field}: {value!r}')
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f'{field} must be greater than zero')

    if places is not None:
        if max_digits is not None and amount >= Decimal(10) ** (max_digits - places):
            raise ValidationError(f'{field} is too large')
        amount = amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise ValidationError(f'{field} must be greater than zero')
    return amount


def parse_reference(value, field):
    """Parse a record reference (positive integer id)."""
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'{field} is required')
    try:
        reference = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}: {value!r}')
    if reference <= 0:
        raise ValidationError(f'Invalid {field}: {value!r}')
    return reference
