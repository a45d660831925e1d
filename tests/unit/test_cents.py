"""Tests for om_common.cents — integer money and basis-point floors."""

from src.om_common.cents import (
    cents_to_display,
    meets_floor,
    min_amount_for_floor,
)


class TestCentsToDisplay:
    def test_whole_dollars(self) -> None:
        assert cents_to_display(6500) == "$65.00"

    def test_pads_cents(self) -> None:
        assert cents_to_display(1205) == "$12.05"

    def test_thousands_separator(self) -> None:
        assert cents_to_display(123_456_78) == "$123,456.78"

    def test_negative(self) -> None:
        assert cents_to_display(-1200) == "-$12.00"


class TestFloor:
    def test_half_of_even_price(self) -> None:
        assert min_amount_for_floor(10_000, 5000) == 5000

    def test_rounds_up_fractional_floor(self) -> None:
        # 9999 * 0.5 = 4999.5 -> the floor is never undercut
        assert min_amount_for_floor(9999, 5000) == 5000

    def test_zero_bps_means_any_positive_amount(self) -> None:
        assert min_amount_for_floor(10_000, 0) == 1

    def test_meets_floor_boundary(self) -> None:
        assert meets_floor(5000, 10_000, 5000) is True
        assert meets_floor(4999, 10_000, 5000) is False

    def test_meets_floor_odd_price(self) -> None:
        assert meets_floor(5000, 9999, 5000) is True
        assert meets_floor(4999, 9999, 5000) is False

    def test_min_amount_always_meets_floor(self) -> None:
        for price in (1, 3, 101, 9999, 10_001, 123_457):
            for bps in (1, 2500, 5000, 7333, 9999):
                assert meets_floor(min_amount_for_floor(price, bps), price, bps)
