from scheduling.errors import ValidationError


def require_int(value, field: str) -> int:
    """JSON ids arrive as ints or numeric strings; anything else is a 400."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
