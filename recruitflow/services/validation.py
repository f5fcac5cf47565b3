"""
Input checks shared by the services.

Request bodies are decoded JSON, so a field may arrive as any JSON type.
These helpers turn the values a service accepts into Python values and
reject everything else with ``ValidationError``.
"""

from decimal import Decimal, InvalidOperation

from recruitflow.exceptions import ValidationError


def optional_text(value, name: str) -> str | None:
    """
    Return ``value`` stripped, or None when it is missing or blank.

    Raises:
        ValidationError: ``value`` is present but not a string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text; got {type(value).__name__}.")
    return value.strip() or None


def parse_amount(value, name: str, positive: bool = False) -> Decimal | None:
    """
    Parse a money amount given as a number or numeric string.

    NaN and infinities are rejected, as are negative amounts (and zero
    when ``positive`` is set).  Missing or empty values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValidationError(f"{name} must be a number; got {type(value).__name__}.")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"{name} must be a number; got {value!r}.") from exc
    if not amount.is_finite():
        raise ValidationError(f"{name} must be a finite number; got {value!r}.")
    if amount < 0 or (positive and amount == 0):
        raise ValidationError(
            f"{name} must be {'positive' if positive else 'zero or more'}."
        )
    return amount


def optional_bool(value, name: str, default: bool = False) -> bool:
    """Return a JSON boolean, ``default`` when missing; reject anything else."""
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false; got {value!r}.")
    return value
