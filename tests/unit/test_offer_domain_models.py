"""Tests for Offer / CounterOffer derived properties."""

from datetime import UTC, datetime, timedelta

from src.om_common.enums import ACTIVE_STATUSES, TERMINAL_STATUSES, OfferStatus
from src.om_offer.domain.models import CounterOffer, Offer

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_offer(**kwargs) -> Offer:
    defaults = dict(
        id="ofr_1",
        listing_id="lst_1",
        buyer_id="buyer",
        seller_id="seller",
        listing_price=10_000,
        initial_amount=7000,
        initial_message=None,
        status=OfferStatus.PENDING,
        expires_at=_NOW + timedelta(days=7),
        created_at=_NOW,
        updated_at=_NOW,
    )
    defaults.update(kwargs)
    return Offer(**defaults)


def _turn(amount: int, from_seller: bool, idx: int = 0) -> CounterOffer:
    return CounterOffer(
        id=f"cof_{idx}",
        offer_id="ofr_1",
        amount=amount,
        from_seller=from_seller,
        message=None,
        created_at=_NOW,
    )


class TestStatusSets:
    def test_partition(self) -> None:
        assert ACTIVE_STATUSES | TERMINAL_STATUSES == set(OfferStatus)
        assert not ACTIVE_STATUSES & TERMINAL_STATUSES

    def test_active_and_terminal_flags(self) -> None:
        assert _make_offer(status=OfferStatus.COUNTERED).is_active
        for status in (OfferStatus.ACCEPTED, OfferStatus.REJECTED, OfferStatus.EXPIRED):
            offer = _make_offer(status=status)
            assert offer.is_terminal
            assert not offer.is_active


class TestCurrentAmount:
    def test_initial_amount_without_counters(self) -> None:
        assert _make_offer().current_amount == 7000

    def test_latest_counter_wins(self) -> None:
        offer = _make_offer(
            status=OfferStatus.COUNTERED,
            counter_offers=[_turn(8500, True, 0), _turn(8000, False, 1)],
        )
        assert offer.current_amount == 8000


class TestTurns:
    def test_seller_responds_to_initial_offer(self) -> None:
        offer = _make_offer()
        assert offer.last_turn_from_seller is False
        assert offer.awaiting_response_from() == "seller"

    def test_buyer_responds_to_seller_counter(self) -> None:
        offer = _make_offer(status=OfferStatus.COUNTERED, counter_offers=[_turn(8500, True)])
        assert offer.last_turn_from_seller is True
        assert offer.awaiting_response_from() == "buyer"

    def test_chain_starts_with_buyer_initial(self) -> None:
        offer = _make_offer(
            status=OfferStatus.COUNTERED,
            counter_offers=[_turn(8500, True, 0), _turn(8000, False, 1)],
        )
        assert offer.chain() == [(False, 7000), (True, 8500), (False, 8000)]


class TestParties:
    def test_is_party(self) -> None:
        offer = _make_offer()
        assert offer.is_party("buyer")
        assert offer.is_party("seller")
        assert not offer.is_party("mallory")

    def test_is_seller(self) -> None:
        offer = _make_offer()
        assert offer.is_seller("seller")
        assert not offer.is_seller("buyer")


class TestAcceptedAmount:
    def test_none_until_accepted(self) -> None:
        assert _make_offer().accepted_amount is None

    def test_equals_current_amount_when_accepted(self) -> None:
        offer = _make_offer(
            status=OfferStatus.ACCEPTED,
            counter_offers=[_turn(8500, True, 0), _turn(8000, False, 1)],
        )
        assert offer.accepted_amount == 8000


class TestLastAmountBy:
    def test_buyer_initial_counts_as_buyer_amount(self) -> None:
        offer = _make_offer()
        assert offer.last_amount_by(False) == 7000
        assert offer.last_amount_by(True) is None

    def test_picks_latest_per_side(self) -> None:
        offer = _make_offer(
            status=OfferStatus.COUNTERED,
            counter_offers=[_turn(8500, True, 0), _turn(8000, False, 1), _turn(8200, True, 2)],
        )
        assert offer.last_amount_by(True) == 8200
        assert offer.last_amount_by(False) == 8000
