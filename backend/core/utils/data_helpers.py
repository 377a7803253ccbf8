# ------------------------------ IMPORTS ------------------------------
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")

# ------------------------------ TIME HELPERS ------------------------------

def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def today() -> date:
    return utcnow().date()

# ------------------------------ PARSING HELPERS ------------------------------

def to_money(amount) -> Decimal:
    """Round an amount to whole cents."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)

def clean_string(value: Optional[str]) -> Optional[str]:
    """Strip a string, mapping blank input to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None

def search_terms(query: Optional[str]) -> list[str]:
    """Split a free-text query into lowercase terms."""
    if not query:
        return []
    return [term.lower() for term in query.split() if term]

def like_pattern(term: str) -> str:
    """Substring pattern for LIKE with wildcards in the term escaped by a backslash."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# ------------------------------ END OF FILE ------------------------------
