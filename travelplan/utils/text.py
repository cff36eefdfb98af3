from typing import Optional


def require_text(value: Optional[str], label: str) -> Optional[str]:
    """Strip a text field and reject it when nothing is left. None passes through."""
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    return value.strip() or None
