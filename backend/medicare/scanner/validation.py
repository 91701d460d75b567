from typing import Optional
from medicare.config import get_settings
from medicare.exceptions import ValidationError


def is_likely_worker_id(value: Optional[str], min_length: Optional[int] = None, max_length: Optional[int] = None) -> bool:
    """Permissive check for manually typed identifiers: length only, no charset rules."""
    settings = get_settings()
    min_length = settings.manual_id_min_length if min_length is None else min_length
    max_length = settings.manual_id_max_length if max_length is None else max_length
    v = (value or "").strip()
    return min_length <= len(v) <= max_length


def validate_manual_id(value: Optional[str]) -> str:
    """Return the trimmed identifier or raise ValidationError."""
    if not is_likely_worker_id(value):
        raise ValidationError("Please enter a valid Worker ID.")
    return value.strip()
