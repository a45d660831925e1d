"""Tests for request-ID handling and the startup Redis probe."""

import logging
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.om_common import redis_client
from src.om_gateway.middleware.request_log import _level_for, resolve_request_id


class TestResolveRequestId:
    def test_keeps_plain_incoming_id(self) -> None:
        assert resolve_request_id("req_abc-123") == "req_abc-123"

    @pytest.mark.parametrize("bad", [None, "", "x" * 65, "evil\nINFO fake line", "a b"])
    def test_generates_when_missing_or_unsafe(self, bad: str | None) -> None:
        generated = resolve_request_id(bad)
        assert generated.startswith("req_")
        assert len(generated) == 16


class TestLogLevel:
    def test_levels(self) -> None:
        assert _level_for("/api/v1/offers", 200) == logging.INFO
        assert _level_for("/api/v1/offers", 409) == logging.WARNING
        assert _level_for("/api/v1/offers", 500) == logging.ERROR
        assert _level_for("/health", 200) == logging.DEBUG


class TestCheckRedis:
    @pytest.mark.asyncio
    async def test_reachable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        client = AsyncMock()
        monkeypatch.setattr(redis_client, "get_redis", AsyncMock(return_value=client))

        assert await redis_client.check_redis() is True
        client.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable_only_warns(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        client = AsyncMock()
        client.ping.side_effect = RedisConnectionError("connection refused")
        monkeypatch.setattr(redis_client, "get_redis", AsyncMock(return_value=client))

        with caplog.at_level(logging.WARNING, logger="src.om_common.redis_client"):
            assert await redis_client.check_redis() is False
        assert "Redis unreachable" in caplog.text

    @pytest.mark.asyncio
    async def test_close_without_client_is_a_no_op(self) -> None:
        await redis_client.close_redis()
