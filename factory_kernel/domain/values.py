"""
Values -- immutable value types shared by every layer.

Responsibility:
    Material enums, the raw-stock key, expense categories, customer roles
    and the money/quantity coercion helpers used when drafts become records.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Imported by records, engines and the
    document codec.

Invariants enforced:
    - Persisted enum values are the labels the factory has always stored
      (Arabic material and category names), so existing documents decode
      without translation.
    - Money is ``Decimal`` -- never ``float``.
    - Quantities are non-negative ``int``.

Failure modes:
    - ValidationError from ``parse_quantity`` / ``parse_money`` on
      negative, fractional or non-numeric input.
    - ValidationError from ``StockKey.of`` / ``parse_enum`` on unknown labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import total_ordering
from typing import Any

from factory_kernel.exceptions import ValidationError


class MaterialType(Enum):
    """Bagged raw material kinds."""

    DOUGH = "عجينة"
    ANDY = "أندي"


class MaterialSize(Enum):
    """Bag gauge."""

    SIZE_18 = 18
    SIZE_24 = 24


class CustomerRole(Enum):
    """The three independent relationships a customer record can model."""

    PRODUCER = "producer"  # machine-work producer
    PROCESSOR = "processor"  # processing contractor
    SALES = "sales"  # buyer of finished goods


class ReversalPolicy(Enum):
    """What to do when undoing a record would drive a counter negative."""

    REJECT = "reject"
    CLAMP = "clamp"


class ExpenseCategory(Enum):
    """Fixed factory cost categories."""

    BAGS = "اكياس"
    SACKS = "شكاير"
    ROPES = "احبال"
    ZIPPERS = "سوسته"
    ELASTIC = "استك"
    THREAD = "فتل"
    BUTTONS = "زراير"
    TRANSPORT = "نقل (تروسيكل)"
    ELECTRICITY = "كهرباء"
    IRON_REPAIR = "تصليح مكوه"
    FINISHING_REPAIR = "تصليح تجهيز"
    KNITTING_MACHINE_REPAIR = "تصليح مكن تريكو"
    GLUE = "لزق"
    SPOOLS = "بكر مزوي"
    SALARIES = "رواتب"
    RENT = "إيجار"
    GENERAL = "عامة"
    OTHER = "أخرى"


@total_ordering
@dataclass(frozen=True)
class StockKey:
    """
    Identity of a raw-stock row: (material type, size, color).

    Sorts by the persisted labels so reports are stable.
    """

    material_type: MaterialType
    size: MaterialSize
    color: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", self.color.strip())

    @classmethod
    def of(cls, material_type: Any, size: Any, color: str) -> StockKey:
        """Build a key from enum members or their persisted labels."""
        return cls(
            material_type=_coerce_enum(MaterialType, material_type, "material_type"),
            size=_coerce_enum(MaterialSize, size, "size"),
            color=color,
        )

    def __lt__(self, other: StockKey) -> bool:
        return self._sort_tuple() < other._sort_tuple()

    def _sort_tuple(self) -> tuple[str, int, str]:
        return (self.material_type.value, self.size.value, self.color)

    def __str__(self) -> str:
        return f"{self.material_type.value}/{self.size.value}/{self.color}"


def _coerce_enum(enum_cls: type[Enum], value: Any, field: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        pass
    if isinstance(value, str):
        # Accept member names ("DOUGH") and numeric strings ("24")
        if value in enum_cls.__members__:
            return enum_cls[value]
        if value.isdigit():
            try:
                return enum_cls(int(value))
            except ValueError:
                pass
    raise ValidationError(field, f"unknown value {value!r}")


def parse_enum(enum_cls: type[Enum], value: Any, field: str) -> Any:
    """Public wrapper around enum coercion for service arguments."""
    return _coerce_enum(enum_cls, value, field)


def parse_quantity(value: Any, field: str) -> int:
    """Coerce a draft quantity to a non-negative int."""
    if isinstance(value, bool):
        raise ValidationError(field, "must be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(field, f"must be a whole number (got {value})")
        value = int(value)
    elif isinstance(value, (str, Decimal)):
        try:
            dec = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(field, f"must be a number (got {value!r})")
        if not dec.is_finite() or dec != dec.to_integral_value():
            raise ValidationError(field, f"must be a whole number (got {value})")
        value = int(dec)
    elif not isinstance(value, int):
        raise ValidationError(field, "must be a number")
    if value < 0:
        raise ValidationError(field, f"cannot be negative (got {value})")
    return value


def parse_money(value: Any, field: str) -> Decimal:
    """Coerce a price or amount to Decimal. Floats go through ``str``."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(field, "must be a number")
    try:
        amount = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        raise ValidationError(field, f"must be a number (got {value!r})")
    if not amount.is_finite():
        raise ValidationError(field, "must be finite")
    if amount < 0:
        raise ValidationError(field, f"cannot be negative (got {amount})")
    return amount


def require_text(value: Any, field: str) -> str:
    """Non-empty, stripped text or ValidationError."""
    text = (value or "").strip() if isinstance(value, str) or value is None else str(value).strip()
    if not text:
        raise ValidationError(field, "is required")
    return text
