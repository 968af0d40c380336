"""
Ledger vertical (category) labels.

A vertical is either one of the known categories for its record type or a
free-text "other" label. Grouping uses `Vertical.key` so that casing and
spacing variants of the same label aggregate into one bucket.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from app.models.ledger import RecordType


class ExpenseVertical(str, Enum):
    """Suggested expense categories"""
    SAAS = "SaaS"
    ENTERPRISE = "Enterprise"
    B2C_HARDWARE = "B2C Hardware"
    B2B_SERVICES = "B2B Services"
    R_AND_D = "R&D"
    MARKETING = "Marketing"
    SALARIES = "Salaries"
    OPS = "Ops"
    COGS = "COGS"
    OTHER = "Other Expenses"


class RevenueVertical(str, Enum):
    """Suggested revenue categories"""
    PRODUCT_SALES = "Product Sales"
    SERVICE_REVENUE = "Service Revenue"
    SUBSCRIPTION_REVENUE = "Subscription Revenue"
    COMMISSION_FEES = "Commission/Transaction Fees"
    ADVERTISING_REVENUE = "Advertising Revenue"
    LICENSING_ROYALTIES = "Licensing & Royalties"
    OTHER = "Other Income"


KnownVertical = Union[ExpenseVertical, RevenueVertical]


def _collapse(label: str) -> str:
    return " ".join(label.split())


def known_verticals(record_type: RecordType) -> type:
    """Enum of suggested verticals for a record type"""
    return ExpenseVertical if record_type == RecordType.EXPENSE else RevenueVertical


@dataclass(frozen=True)
class Vertical:
    """Tagged vertical: exactly one of `known` or `other` is set"""
    known: Optional[KnownVertical] = None
    other: Optional[str] = None

    @classmethod
    def parse(cls, record_type: RecordType, label: str) -> "Vertical":
        cleaned = _collapse(label or "")
        for member in known_verticals(record_type):
            if member.value.casefold() == cleaned.casefold():
                return cls(known=member)
        return cls(other=cleaned)

    @property
    def key(self) -> str:
        if self.known is not None:
            return self.known.value
        return f"other:{self.other.casefold()}"

    @property
    def label(self) -> str:
        return self.known.value if self.known is not None else self.other


def resolve_vertical_label(
    record_type: RecordType,
    vertical: str,
    other_label: Optional[str] = None,
) -> str:
    """
    Canonical label to store for a vertical.

    Known categories are stored with their canonical spelling. Choosing the
    "Other Expenses" / "Other Income" option together with a custom label
    stores the custom label instead.
    """
    parsed = Vertical.parse(record_type, vertical)
    if parsed.known is not None and parsed.known.name == "OTHER" and other_label and other_label.strip():
        return Vertical.parse(record_type, other_label).label
    return parsed.label
