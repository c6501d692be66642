"""Customer usage sheet parsing and cell value cleaning"""

import math
from typing import Any, List, Optional, Sequence
from plan_advisor.domain.models import CustomerUsage

UNLIMITED = 1_000_000_000
UNLIMITED_MARKERS = {"不限", "∞", "unlimited"}
TRUTHY_MARKERS = {"1", "y", "yes", "true", "是", "有"}

# Column layout of the usage sheet
PHONE, LOCATION, CURRENT_PLAN, CURRENT_PRICE = 0, 1, 2, 3
ARPU, DATA_GB, VOICE_MIN = 6, 7, 8
OVERAGE, OVERAGE_RATIO, REMARKS, HAS_BROADBAND = 9, 10, 11, 12
MIN_COLUMNS = 8


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def clean_value(value: Any, kind: str = "number") -> float:
    """
    Coerce a spreadsheet cell to a number.

    - Blank cells -> 0
    - Numeric cells pass through unchanged
    - "不限" / "∞" / "unlimited" -> UNLIMITED
    - kind="percentage": "12.5%" -> 0.125, bare text is kept as a fraction
    - Thousands separators are stripped, other text is rounded to an integer
    - Anything unparsable -> 0
    """
    if _is_blank(value):
        return 0

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value

    text = str(value).strip()

    if text.lower() in UNLIMITED_MARKERS:
        return UNLIMITED

    if kind == "percentage":
        try:
            if text.endswith("%"):
                return float(text[:-1]) / 100
            return float(text)
        except ValueError:
            return 0

    try:
        number = float(text.replace(",", ""))
    except ValueError:
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(math.floor(number + 0.5))


def _text(value: Any) -> str:
    if _is_blank(value):
        return ""
    # Spreadsheet readers hand back phone numbers as floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _text(value).lower() in TRUTHY_MARKERS


def parse_usage_row(row: Optional[Sequence[Any]]) -> Optional[CustomerUsage]:
    """
    Build a CustomerUsage from one sheet row.

    Expected columns: phone, location, current plan, current price,
    data saturation, voice saturation, 3-month ARPU, data usage, voice usage,
    overage amount, overage ratio, remarks, has broadband (optional).

    Returns None for short rows or rows without a phone number.
    """
    if not row or len(row) < MIN_COLUMNS:
        return None

    def cell(idx: int) -> Any:
        return row[idx] if idx < len(row) else None

    phone = _text(cell(PHONE))
    if not phone:
        return None

    return CustomerUsage(
        phone=phone,
        location=_text(cell(LOCATION)),
        current_plan=_text(cell(CURRENT_PLAN)),
        current_price=clean_value(cell(CURRENT_PRICE)),
        arpu=clean_value(cell(ARPU)),
        data_gb=clean_value(cell(DATA_GB)),
        voice_min=clean_value(cell(VOICE_MIN)),
        has_broadband=_flag(cell(HAS_BROADBAND)),
        overage=clean_value(cell(OVERAGE)),
        overage_ratio=clean_value(cell(OVERAGE_RATIO), "percentage"),
        remarks=_text(cell(REMARKS)),
    )


def parse_usage_rows(rows: Sequence[Sequence[Any]]) -> List[CustomerUsage]:
    """Parse all rows, skipping the ones that do not describe a customer"""
    customers = []
    for row in rows:
        customer = parse_usage_row(row)
        if customer:
            customers.append(customer)
    return customers
