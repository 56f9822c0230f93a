"""Core allocation logic for dividing a shared total between participants."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from fractions import Fraction
from typing import Any

from .exceptions import InvalidAmount, InvalidParticipant
from .models import Allocation, SplitExpense, SplitStrategy
from .money import DEFAULT_EPSILON, Money, parse_decimal

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def parse_percentage(value: Any) -> Decimal:
    """
    Parse a percentage input.

    Raises:
        InvalidAmount: If the value is not numeric or lies outside 0-100
    """
    percentage = parse_decimal(value)
    if percentage < 0 or percentage > HUNDRED:
        raise InvalidAmount(f"Percentage must be between 0 and 100: {value}")
    return percentage


def allocate(
    total_amount: Money,
    participant_count: int,
    strategy: SplitStrategy | str,
    inputs: Sequence[Any] | None = None,
    payer_index: int = 0,
    epsilon: Decimal = DEFAULT_EPSILON,
) -> Allocation:
    """
    Compute each participant's share of a total.

    Strategies:
    1. equal: integer division of the minor units; the remainder goes to the
       payer so the shares always sum to the total
    2. percentage: share = round(total * pct / 100); valid when percentages sum
       to 100, in which case any rounding residual also goes to the payer
    3. custom: inputs are the shares; valid when they sum to the total

    A mismatch is never raised. The result carries ``valid=False`` and the
    discrepancy (total minus allocated, positive = under-allocated) so the
    caller can block persistence.

    Args:
        total_amount: Amount being shared
        participant_count: Number of participants (>= 1)
        strategy: Splitting strategy
        inputs: Percentages or custom amounts, one per participant
        payer_index: Participant absorbing rounding remainders
        epsilon: Reconciliation tolerance in major units

    Returns:
        Allocation with shares, validity and discrepancy

    Raises:
        InvalidParticipant: If the participant count, inputs or payer index are inconsistent
        InvalidAmount: If an input is malformed
    """
    strategy = SplitStrategy.parse(strategy)
    if participant_count < 1:
        raise InvalidParticipant("A split needs at least one participant")
    if not 0 <= payer_index < participant_count:
        raise InvalidParticipant(
            f"Payer index {payer_index} out of range for {participant_count} participants"
        )
    if strategy != SplitStrategy.EQUAL:
        if inputs is None or len(inputs) != participant_count:
            raise InvalidParticipant(
                f"Expected {participant_count} {strategy.value} inputs, "
                f"got {0 if inputs is None else len(inputs)}"
            )

    if strategy == SplitStrategy.EQUAL:
        return _allocate_equal(total_amount, participant_count, payer_index)
    if strategy == SplitStrategy.PERCENTAGE:
        assert inputs is not None
        return _allocate_percentage(total_amount, inputs, payer_index, epsilon)
    assert inputs is not None
    return _allocate_custom(total_amount, inputs, epsilon)


def _allocate_equal(total: Money, count: int, payer_index: int) -> Allocation:
    base, remainder = divmod(total.minor_units, count)
    units = [base] * count
    units[payer_index] += remainder

    if remainder:
        logger.info(
            f"Assigned {remainder} minor unit remainder to participant {payer_index}"
        )

    return Allocation(
        shares=[Money.from_minor(u) for u in units],
        valid=True,
        discrepancy=Money.zero(),
    )


def _allocate_percentage(
    total: Money, inputs: Sequence[Any], payer_index: int, epsilon: Decimal
) -> Allocation:
    percentages = [parse_percentage(value) for value in inputs]
    shares = [total.multiply_by_scalar(Fraction(p) / 100) for p in percentages]
    percentage_total = sum(percentages, Decimal("0"))
    valid = abs(HUNDRED - percentage_total) <= epsilon

    residual = total - Money.total(shares)
    if valid and not residual.is_zero():
        shares[payer_index] = shares[payer_index] + residual
        logger.info(
            f"Applied rounding adjustment: {residual} to participant {payer_index}"
        )

    return Allocation(
        shares=shares,
        valid=valid,
        discrepancy=total - Money.total(shares),
        percentage_total=percentage_total,
    )


def _allocate_custom(
    total: Money, inputs: Sequence[Any], epsilon: Decimal
) -> Allocation:
    shares = [Money.from_major(value) for value in inputs]
    allocated = Money.total(shares)
    return Allocation(
        shares=shares,
        valid=allocated.approx_equals(total, epsilon),
        discrepancy=total - allocated,
    )


def check(split: SplitExpense, epsilon: Decimal = DEFAULT_EPSILON) -> Allocation:
    """
    Re-validate a split record as it stands, without redistributing shares.

    Percentage splits are judged on the entered percentages, the others on the
    stored shares.
    """
    shares = [p.share for p in split.participants]
    allocated = Money.total(shares)
    discrepancy = split.total_amount - allocated

    if split.strategy == SplitStrategy.PERCENTAGE:
        percentage_total = sum(
            (p.share_input or Decimal("0") for p in split.participants), Decimal("0")
        )
        valid = abs(HUNDRED - percentage_total) <= epsilon and discrepancy.is_zero()
        return Allocation(
            shares=shares,
            valid=valid,
            discrepancy=discrepancy,
            percentage_total=percentage_total,
        )

    return Allocation(
        shares=shares,
        valid=bool(split.participants) and allocated.approx_equals(
            split.total_amount, epsilon
        ),
        discrepancy=discrepancy,
    )
