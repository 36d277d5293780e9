from typing import Optional

_EMAIL_MASK_PREFIX_LEN = 5
_EMAIL_MASK_SUFFIX_LEN = 5
_EMAIL_MIN_LENGTH_FOR_MASKING = _EMAIL_MASK_PREFIX_LEN + _EMAIL_MASK_SUFFIX_LEN


def normalize_email(email: object) -> Optional[str]:
    """Trim and lowercase an email. Returns None for non-strings and blank values."""
    if not isinstance(email, str):
        return None
    normalized = email.strip().lower()
    return normalized or None


def mask_email(email: str) -> str:
    """Mask email for logging - show first 5 and last 5 characters only.

    Args:
        email: The email address to mask.

    Returns:
        Masked email like "john.*****.com" or original if too short.
    """
    if len(email) <= _EMAIL_MIN_LENGTH_FOR_MASKING:
        return email
    return f"{email[:_EMAIL_MASK_PREFIX_LEN]}*****{email[-_EMAIL_MASK_SUFFIX_LEN:]}"
