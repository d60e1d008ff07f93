"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from assetbook.domain.errors import InvalidAmount

# Journal amounts are stored with two decimal places
AMOUNT_PLACES = 2
_CENT = Decimal(1).scaleb(-AMOUNT_PLACES)

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥]|EUR|USD", re.IGNORECASE)
# Unicode whitespace covers the non-breaking spaces French banks use as thousands separators
_SPACES = re.compile(r"\s")


def _normalize_separators(amount_str: str) -> str:
    """Turn US (1,234.56) and French (1 234,56 / 1.234,56) notations into 1234.56."""
    has_comma = "," in amount_str
    has_dot = "." in amount_str

    if has_comma and has_dot:
        # Whichever separator comes last is the decimal one
        if amount_str.rfind(",") > amount_str.rfind("."):
            return amount_str.replace(".", "").replace(",", ".")
        return amount_str.replace(",", "")

    if has_comma:
        head, _, tail = amount_str.rpartition(",")
        # A single comma followed by exactly three digits is a thousands separator
        if amount_str.count(",") == 1 and len(tail) == 3 and head.lstrip("+-").isdigit():
            return head + tail
        if amount_str.count(",") > 1:
            return amount_str.replace(",", "")
        return f"{head}.{tail}"

    return amount_str


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45", "-123.45", "+123.45"
    - "$123.45", "123,45 €", "EUR 12"
    - "1,234.56" (US grouping)
    - "1 234,56" and "1.234,56" (French grouping)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidAmount: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise InvalidAmount("Empty amount string")

    cleaned = _CURRENCY_SYMBOLS.sub("", amount_str.strip())
    cleaned = _SPACES.sub("", cleaned)

    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        is_negative = True
        cleaned = cleaned[1:-1]

    cleaned = _normalize_separators(cleaned)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise InvalidAmount(f"Could not parse amount '{amount_str}'") from e

    if not amount.is_finite():
        raise InvalidAmount(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def coerce_amount(value) -> Decimal:
    """Convert a Decimal, int or amount string to Decimal without checking precision.

    Raises:
        InvalidAmount: For floats, booleans, other types, or non-finite values
    """
    if isinstance(value, (bool, float)):
        raise InvalidAmount(f"Amount {value!r} must be a Decimal, int or string, not {type(value).__name__}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        amount = parse_amount(value)
    else:
        raise InvalidAmount(f"Unsupported amount type: {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmount(f"Amount {value!r} is not a finite number")
    return amount


def check_amount_places(amount: Decimal) -> Decimal:
    """Reject amounts with more than two significant decimal places."""
    if amount != amount.quantize(_CENT):
        raise InvalidAmount(f"Amount {amount} has more than {AMOUNT_PLACES} decimal places")
    return amount


def to_amount(value) -> Decimal:
    """Coerce a posting amount to a Decimal the ledger can store exactly."""
    return check_amount_places(coerce_amount(value))
