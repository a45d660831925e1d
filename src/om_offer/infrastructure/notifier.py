"""RedisOfferNotifier — publishes offer state changes on a Redis pub/sub channel.

Email, push and SSE fan-out subscribe to the channel; delivery and retries are
their concern. Payload:
    {"offer_id", "transition", "status", "buyer_id", "seller_id",
     "current_amount_cents", "version", "occurred_at"}
"""
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as aioredis

from src.om_common.datetime_utils import utc_now
from src.om_common.enums import TransitionKind
from src.om_offer.domain.models import Offer

logger = logging.getLogger(__name__)


def build_event(offer: Offer, transition: TransitionKind) -> dict[str, Any]:
    return {
        "offer_id": offer.id,
        "transition": transition.value,
        "status": offer.status.value,
        "buyer_id": offer.buyer_id,
        "seller_id": offer.seller_id,
        "current_amount_cents": offer.current_amount,
        "version": offer.version,
        "occurred_at": utc_now().isoformat(),
    }


class RedisOfferNotifier:
    def __init__(
        self, redis_factory: Callable[[], Awaitable[aioredis.Redis]], channel: str
    ) -> None:
        self._redis_factory = redis_factory
        self._channel = channel

    async def notify(self, offer: Offer, transition: TransitionKind) -> None:
        redis = await self._redis_factory()
        receivers = await redis.publish(self._channel, json.dumps(build_event(offer, transition)))
        logger.info(
            "Published %s for offer %s (v%d) to %s [%d receivers]",
            transition.value, offer.id, offer.version, self._channel, receivers,
        )
