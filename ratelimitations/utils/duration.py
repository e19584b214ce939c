import re

from ratelimitations.core.errors import InvalidDurationError

UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}

_GROUP_RE = re.compile(r"(\d+)\s*([smhdw])", re.IGNORECASE)
_FULL_RE = re.compile(r"(?:\d+\s*[smhdw]\s*)+", re.IGNORECASE)


def parse_duration(text: str | int) -> int:
    """Convert a concise duration like "90s", "1h" or "1h30m" to whole seconds.

    A bare integer (or all-digit string) is taken as seconds. Units are
    s, m, h, d and w; groups may repeat and are summed, so "1h30m" and
    "90m" both normalize to 5400.

    Args:
        text: Duration string (or integer seconds).

    Returns:
        int: Positive number of seconds.

    Raises:
        InvalidDurationError: If the value is empty, malformed or zero.
    """
    if isinstance(text, bool) or not isinstance(text, (str, int)):
        raise InvalidDurationError(
            code="invalid_duration",
            message=f"Duration must be a string or integer, got {type(text).__name__}",
            details={"value": repr(text)},
        )

    raw = str(text).strip()
    if raw.isdigit():
        seconds = int(raw)
    elif raw and _FULL_RE.fullmatch(raw):
        seconds = sum(
            int(amount) * UNIT_SECONDS[unit.lower()]
            for amount, unit in _GROUP_RE.findall(raw)
        )
    else:
        raise InvalidDurationError(
            code="invalid_duration",
            message=f"Unparseable duration: '{text}'",
            details={"value": str(text), "hint": "Use forms like '90s', '15m', '1h30m' or '2d'"},
        )

    if seconds <= 0:
        raise InvalidDurationError(
            code="invalid_duration",
            message=f"Duration must be positive: '{text}'",
            details={"value": str(text)},
        )
    return seconds
