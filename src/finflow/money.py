"""Fixed-precision money amounts stored as integer minor units (cents)."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from .exceptions import InvalidAmount

MINOR_UNITS_PER_MAJOR = 100
DEFAULT_EPSILON = Decimal("0.01")


def to_minor_units(amount: Decimal) -> int:
    """
    Convert a Decimal major-unit amount to integer minor units.
    Uses ROUND_HALF_UP for consistency.

    Raises:
        InvalidAmount: If the amount is too large to represent exactly
    """
    try:
        minor = amount * MINOR_UNITS_PER_MAJOR
        return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise InvalidAmount(f"Amount out of range: {amount}") from e


def parse_decimal(value: Any) -> Decimal:
    """
    Parse a user-supplied number into a finite Decimal.

    Floats are converted through ``str`` so 0.1 becomes Decimal("0.1") rather
    than its binary expansion.

    Raises:
        InvalidAmount: If the value is not numeric
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidAmount(f"Not a numeric amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite: {value!r}")
    return amount


def _round_half_up(value: Fraction) -> int:
    sign = -1 if value < 0 else 1
    return sign * int(abs(value) + Fraction(1, 2))


class Money(BaseModel):
    """An amount of money held as an integer count of minor units.

    All arithmetic stays on integers; ``approx_equals`` is the comparison to use
    when checking that shares reconcile to a total.
    """

    model_config = ConfigDict(frozen=True)

    minor_units: int

    @model_validator(mode="before")
    @classmethod
    def _coerce_major(cls, data: Any) -> Any:
        # Records may be built from "12.50" / Decimal / int major-unit values
        if isinstance(data, (dict, Money)):
            return data
        return {"minor_units": to_minor_units(parse_decimal(data))}

    @classmethod
    def from_major(cls, value: Any, allow_negative: bool = False) -> "Money":
        """
        Build Money from a decimal string or number in major units.

        Args:
            value: e.g. "100.00", Decimal("12.5"), 7
            allow_negative: Accept amounts below zero

        Raises:
            InvalidAmount: On non-numeric input, or negative input when disallowed
        """
        if isinstance(value, Money):
            money = value
        else:
            money = cls(minor_units=to_minor_units(parse_decimal(value)))
        if money.minor_units < 0 and not allow_negative:
            raise InvalidAmount(f"Amount cannot be negative: {value}")
        return money

    @classmethod
    def from_minor(cls, minor_units: int) -> "Money":
        return cls(minor_units=minor_units)

    @classmethod
    def zero(cls) -> "Money":
        return cls(minor_units=0)

    @classmethod
    def total(cls, amounts) -> "Money":
        return cls(minor_units=sum(m.minor_units for m in amounts))

    @property
    def amount(self) -> Decimal:
        """Value in major units, always with two decimal places."""
        return Decimal(self.minor_units).scaleb(-2)

    def add(self, other: "Money") -> "Money":
        return Money(minor_units=self.minor_units + other.minor_units)

    def subtract(self, other: "Money") -> "Money":
        return Money(minor_units=self.minor_units - other.minor_units)

    def multiply_by_scalar(self, factor: int | Decimal | Fraction | str) -> "Money":
        """Multiply by an exact rational factor, rounding half up to minor units."""
        try:
            exact = Fraction(self.minor_units) * Fraction(factor)
        except (TypeError, ValueError) as e:
            raise InvalidAmount(f"Not a numeric factor: {factor!r}") from e
        return Money(minor_units=_round_half_up(exact))

    def approx_equals(
        self, other: "Money", epsilon: Decimal | str = DEFAULT_EPSILON
    ) -> bool:
        """True when the two amounts differ by at most ``epsilon``."""
        threshold = Fraction(parse_decimal(epsilon)) * MINOR_UNITS_PER_MAJOR
        return abs(self.minor_units - other.minor_units) <= threshold

    def is_zero(self) -> bool:
        return self.minor_units == 0

    def is_negative(self) -> bool:
        return self.minor_units < 0

    def to_display_string(self) -> str:
        """Grouped two-decimal rendering, e.g. ``1,234.50``. No currency symbol."""
        return f"{self.amount:,.2f}"

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __neg__(self) -> "Money":
        return Money(minor_units=-self.minor_units)

    def __abs__(self) -> "Money":
        return Money(minor_units=abs(self.minor_units))

    def __lt__(self, other: "Money") -> bool:
        return self.minor_units < other.minor_units

    def __le__(self, other: "Money") -> bool:
        return self.minor_units <= other.minor_units

    def __gt__(self, other: "Money") -> bool:
        return self.minor_units > other.minor_units

    def __ge__(self, other: "Money") -> bool:
        return self.minor_units >= other.minor_units

    def __str__(self) -> str:
        return f"{self.amount:.2f}"
