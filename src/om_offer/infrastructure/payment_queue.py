"""RedisPaymentQueue — hands accepted offers to the billing service.

The billing worker BRPOPs from the list; capture, retries and receipts belong
to it. The negotiation side only guarantees one enqueue per successful accept.
"""
import json
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis

from src.om_common.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class RedisPaymentQueue:
    def __init__(
        self, redis_factory: Callable[[], Awaitable[aioredis.Redis]], queue_key: str
    ) -> None:
        self._redis_factory = redis_factory
        self._queue_key = queue_key

    async def request_payment(
        self, offer_id: str, amount_cents: int, buyer_id: str, seller_id: str
    ) -> None:
        payload = {
            "offer_id": offer_id,
            "amount_cents": amount_cents,
            "buyer_id": buyer_id,
            "seller_id": seller_id,
            "requested_at": utc_now().isoformat(),
        }
        redis = await self._redis_factory()
        await redis.lpush(self._queue_key, json.dumps(payload))
        logger.info("Payment requested for offer %s: %d cents", offer_id, amount_cents)
