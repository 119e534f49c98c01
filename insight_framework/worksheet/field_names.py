"""
Field-name normalization: raw BI field names to human-readable labels.

BI tools hand out names such as "SUM(Sales)", "CNTD(Id)" or "DAY(Order Date)".
normalize_field_name applies an ordered rule table, first match wins:

1. Exact label override (raw name, with a trailing ')' added, or removed)
2. Date-part function, "DAY(Order Date)" -> "Day of Order Date"
   (also recognized when the closing parenthesis is missing)
3. Strip one or two layers of aggregation wrapping
4. Record-count aggregates, "CNTD(Id)" -> "Total <entity>" or "Record Count"
5. Fixed vocabulary mapping, "open" -> "Open Rate"
6. Title case, with " Rate" appended for rates that lack the word
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

DATE_PART_FUNCTIONS = r"DAY|MONTH|YEAR|WEEK|QUARTER|HOUR|MINUTE|SECOND|DATEPART|DATENAME"

DATE_PART_PATTERN = re.compile(rf"^({DATE_PART_FUNCTIONS})\s*\(\s*(.+?)\s*\)$", re.IGNORECASE)
UNBALANCED_DATE_PART_PATTERN = re.compile(rf"^({DATE_PART_FUNCTIONS})\s*\(\s*(.+)$", re.IGNORECASE)

AGGREGATION_PREFIX = re.compile(
    r"^(AGG|SUM|AVG|CNTD?|COUNT|ATTR|MIN|MAX|MEDIAN|STDEV|VAR)\s*\(\s*", re.IGNORECASE
)
NESTED_AGGREGATION = re.compile(r"^(AGG|SUM|AVG|CNTD?|COUNT)\s*\(", re.IGNORECASE)
CLOSING_PAREN = re.compile(r"\s*\)$")
COUNT_AGGREGATION = re.compile(r"^(CNTD?|COUNT)\s*\(", re.IGNORECASE)

RECORD_REFERENCES = ("id", "record", "*")
RECORD_COUNT_LABEL = "Record Count"

FIELD_MAPPINGS: Dict[str, str] = {
    "click-to-open": "Click-to-Open Rate",
    "clickthrough": "Clickthrough Rate",
    "delivery": "Delivery Rate",
    "open": "Open Rate",
    "open rate": "Open Rate",
    "bounce": "Bounce Rate",
    "revenue": "Revenue",
    "sales": "Sales",
    "profit": "Profit",
    "cost": "Cost",
    "quantity": "Quantity",
    "email": "Emails",
    "emails": "Emails",
    "campaign": "Campaigns",
    "campaigns": "Campaigns",
    "order": "Orders",
    "orders": "Orders",
    "customer": "Customers",
    "customers": "Customers",
    "user": "Users",
    "users": "Users",
    "transaction": "Transactions",
    "transactions": "Transactions",
}


@dataclass(frozen=True)
class LabelContext:
    """Inputs shared by every normalization rule."""
    name: str
    label_overrides: Mapping[str, str]
    is_rate: bool = False
    entity_hint: Optional[str] = None


def strip_aggregation(name: str) -> str:
    """Remove one layer of aggregation wrapping, and a second if one remains."""
    cleaned = CLOSING_PAREN.sub("", AGGREGATION_PREFIX.sub("", name, count=1)).strip()
    if NESTED_AGGREGATION.match(cleaned):
        cleaned = CLOSING_PAREN.sub("", AGGREGATION_PREFIX.sub("", cleaned, count=1)).strip()
    return cleaned


def title_case(text: str) -> str:
    """'order_total-value' -> 'Order Total Value'."""
    words = re.sub(r"\s+", " ", re.sub(r"[_-]", " ", text)).strip().split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


# -----------------------------------------------------------------------------
# Rules: each returns a label, or None to pass to the next rule
# -----------------------------------------------------------------------------

def _override(ctx: LabelContext) -> Optional[str]:
    name = ctx.name
    with_paren = name if name.endswith(")") else name + ")"
    without_paren = name[:-1] if name.endswith(")") else name
    for candidate in (name, with_paren, without_paren):
        label = ctx.label_overrides.get(candidate)
        if label:
            return label
    return None


def _date_part(ctx: LabelContext) -> Optional[str]:
    match = DATE_PART_PATTERN.match(ctx.name) or UNBALANCED_DATE_PART_PATTERN.match(ctx.name)
    if not match:
        return None
    function = match.group(1).capitalize()
    inner = normalize_field_name(
        match.group(2), ctx.label_overrides, is_rate=ctx.is_rate, entity_hint=ctx.entity_hint
    )
    return f"{function} of {inner}"


def _record_count(ctx: LabelContext) -> Optional[str]:
    if not COUNT_AGGREGATION.match(ctx.name):
        return None
    if strip_aggregation(ctx.name).lower() not in RECORD_REFERENCES:
        return None
    return f"Total {ctx.entity_hint}" if ctx.entity_hint else RECORD_COUNT_LABEL


def _vocabulary(ctx: LabelContext) -> Optional[str]:
    return FIELD_MAPPINGS.get(strip_aggregation(ctx.name).lower())


def _title(ctx: LabelContext) -> Optional[str]:
    label = title_case(strip_aggregation(ctx.name))
    if ctx.is_rate and "rate" not in label.lower():
        label += " Rate"
    return label.strip() or ctx.name


RULES: List[Tuple[str, Callable[[LabelContext], Optional[str]]]] = [
    ("override", _override),
    ("date_part", _date_part),
    ("record_count", _record_count),
    ("vocabulary", _vocabulary),
    ("title_case", _title),
]


def normalize_field_name(
    name: str,
    label_overrides: Optional[Mapping[str, str]] = None,
    is_rate: bool = False,
    entity_hint: Optional[str] = None,
) -> str:
    """
    Turn a raw field name into a readable label.

    Args:
        name: Raw field name, e.g. "SUM(Sales)"
        label_overrides: Exact name -> label mapping, checked first
        is_rate: Append " Rate" to title-cased labels lacking the word
        entity_hint: Noun for record-count aggregates, e.g. "Orders"

    Returns:
        Readable label; an empty name is returned unchanged

    Example:
        >>> normalize_field_name("CNTD(Id)", entity_hint="Orders")
        'Total Orders'
    """
    if not name:
        return name
    ctx = LabelContext(
        name=name,
        label_overrides=label_overrides or {},
        is_rate=is_rate,
        entity_hint=entity_hint,
    )
    for _, rule in RULES:
        label = rule(ctx)
        if label is not None:
            return label
    return name
