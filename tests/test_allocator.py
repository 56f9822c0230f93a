"""Tests for the split allocator."""

from decimal import Decimal

import pytest

from finflow.allocator import allocate, check
from finflow.exceptions import InvalidAmount, InvalidParticipant, InvalidStrategy
from finflow.models import Participant, SplitExpense, SplitStrategy
from finflow.money import Money


def money(value: str) -> Money:
    return Money.from_major(value)


class TestEqualSplit:
    """Equal strategy: remainder goes to the payer."""

    def test_hundred_three_ways(self):
        """100.00 between 3 -> 33.34 / 33.33 / 33.33."""
        result = allocate(money("100.00"), 3, SplitStrategy.EQUAL)

        assert result.shares == [money("33.34"), money("33.33"), money("33.33")]
        assert Money.total(result.shares) == money("100.00")
        assert result.valid
        assert result.discrepancy.is_zero()

    def test_remainder_follows_payer_index(self):
        result = allocate(money("10.00"), 3, "equal", payer_index=2)
        assert result.shares == [money("3.33"), money("3.33"), money("3.34")]

    def test_even_division(self):
        result = allocate(money("90"), 3, SplitStrategy.EQUAL)
        assert result.shares == [money("30")] * 3

    def test_single_participant(self):
        result = allocate(money("12.34"), 1, SplitStrategy.EQUAL)
        assert result.shares == [money("12.34")]

    def test_more_participants_than_cents(self):
        result = allocate(money("0.02"), 5, SplitStrategy.EQUAL)
        assert [s.minor_units for s in result.shares] == [2, 0, 0, 0, 0]

    def test_sum_always_reconciles(self):
        """No remainder loss for any total and count."""
        for cents in (0, 1, 7, 99, 100, 101, 9999, 123457):
            for count in range(1, 12):
                result = allocate(Money.from_minor(cents), count, SplitStrategy.EQUAL)
                assert Money.total(result.shares).approx_equals(Money.from_minor(cents))
                assert Money.total(result.shares).minor_units == cents

    def test_zero_participants(self):
        with pytest.raises(InvalidParticipant):
            allocate(money("10"), 0, SplitStrategy.EQUAL)

    def test_payer_out_of_range(self):
        with pytest.raises(InvalidParticipant):
            allocate(money("10"), 2, SplitStrategy.EQUAL, payer_index=2)


class TestPercentageSplit:
    """Percentage strategy."""

    def test_exact_percentages(self):
        result = allocate(money("200"), 2, SplitStrategy.PERCENTAGE, ["60", "40"])
        assert result.shares == [money("120"), money("80")]
        assert result.valid
        assert result.percentage_total == Decimal("100")

    def test_rounding_residual_goes_to_payer(self):
        """33.33/33.33/33.34% of 10.00 rounds to 9.99; payer takes the cent."""
        result = allocate(
            money("10.00"), 3, SplitStrategy.PERCENTAGE, ["33.33", "33.33", "33.34"]
        )
        assert result.valid
        assert result.shares == [money("3.34"), money("3.33"), money("3.33")]
        assert result.discrepancy.is_zero()

    def test_under_hundred_is_invalid(self):
        """Percentages summing to 97 report the gap instead of raising."""
        result = allocate(money("100"), 3, SplitStrategy.PERCENTAGE, ["50", "30", "17"])
        assert not result.valid
        assert result.percentage_total == Decimal("97")
        assert result.discrepancy == money("3.00")

    def test_over_hundred_has_negative_discrepancy(self):
        result = allocate(money("100"), 2, SplitStrategy.PERCENTAGE, ["60", "50"])
        assert not result.valid
        assert result.discrepancy == Money.from_major("-10", allow_negative=True)

    def test_sub_epsilon_drift_is_valid(self):
        result = allocate(
            money("90"), 3, SplitStrategy.PERCENTAGE, ["33.333", "33.333", "33.333"]
        )
        assert result.valid
        assert Money.total(result.shares) == money("90")

    def test_thirds_within_epsilon(self):
        """33.33 x 3 sums to 99.99%, which is within tolerance; the payer takes the cent."""
        result = allocate(
            money("100"), 3, SplitStrategy.PERCENTAGE, ["33.33", "33.33", "33.33"], payer_index=2
        )
        assert result.valid
        assert result.shares == [money("33.33"), money("33.33"), money("33.34")]
        assert result.discrepancy.is_zero()

    def test_just_outside_epsilon(self):
        result = allocate(money("100"), 2, SplitStrategy.PERCENTAGE, ["50", "49.98"])
        assert not result.valid
        assert result.percentage_total == Decimal("99.98")

    def test_out_of_range_percentage(self):
        with pytest.raises(InvalidAmount):
            allocate(money("100"), 2, SplitStrategy.PERCENTAGE, ["120", "-20"])

    def test_input_count_must_match(self):
        with pytest.raises(InvalidParticipant):
            allocate(money("100"), 3, SplitStrategy.PERCENTAGE, ["50", "50"])


class TestCustomSplit:
    """Custom strategy."""

    def test_reconciled_amounts(self):
        result = allocate(money("100"), 2, SplitStrategy.CUSTOM, ["70.25", "29.75"])
        assert result.valid
        assert result.shares == [money("70.25"), money("29.75")]

    def test_under_allocated(self):
        """Inputs summing to 99.50 against 100.00."""
        result = allocate(money("100.00"), 2, SplitStrategy.CUSTOM, ["60", "39.50"])
        assert not result.valid
        assert result.discrepancy == money("0.50")

    def test_over_allocated_sign(self):
        result = allocate(money("100.00"), 2, SplitStrategy.CUSTOM, ["60", "41"])
        assert not result.valid
        assert result.discrepancy.minor_units == -100

    def test_one_cent_gap_is_within_epsilon(self):
        result = allocate(money("100.00"), 2, SplitStrategy.CUSTOM, ["60", "39.99"])
        assert result.valid
        assert result.discrepancy == money("0.01")

    def test_two_cent_gap_is_invalid(self):
        result = allocate(money("100.00"), 2, SplitStrategy.CUSTOM, ["60", "39.98"])
        assert not result.valid

    def test_inputs_must_be_numeric(self):
        with pytest.raises(InvalidAmount):
            allocate(money("100.00"), 2, SplitStrategy.CUSTOM, ["60", "forty"])

    def test_missing_inputs(self):
        with pytest.raises(InvalidParticipant):
            allocate(money("100.00"), 2, SplitStrategy.CUSTOM)


class TestStrategyParsing:
    """Strategy names from user input."""

    def test_case_insensitive(self):
        result = allocate(money("10"), 2, "Equal")
        assert result.shares == [money("5"), money("5")]

    def test_unknown_strategy(self):
        with pytest.raises(InvalidStrategy, match="bogus"):
            allocate(money("10"), 2, "bogus")


class TestCheck:
    """Re-validation of a stored record."""

    def make_split(self, strategy, shares, inputs=None):
        return SplitExpense(
            title="Dinner",
            total_amount="100",
            category="Food & Dining",
            strategy=strategy,
            participants=[
                Participant(
                    name=f"P{i}",
                    share=share,
                    share_input=None if inputs is None else inputs[i],
                    is_payer=i == 0,
                )
                for i, share in enumerate(shares)
            ],
        )

    def test_custom_valid(self):
        split = self.make_split(SplitStrategy.CUSTOM, ["40", "60"])
        assert check(split).valid

    def test_custom_invalid(self):
        split = self.make_split(SplitStrategy.CUSTOM, ["40", "59.50"])
        result = check(split)
        assert not result.valid
        assert result.discrepancy == money("0.50")

    def test_percentage_uses_inputs(self):
        split = self.make_split(
            SplitStrategy.PERCENTAGE, ["50", "47"], inputs=[Decimal("50"), Decimal("47")]
        )
        result = check(split)
        assert not result.valid
        assert result.percentage_total == Decimal("97")
