"""Snowflake-style ID generator for offer and counter-offer IDs.

Generates time-ordered, unique string IDs with a short type prefix
("ofr_1234...", "cof_1234...") so an ID is self-describing in logs and
notification payloads. Simplified for single-process deployments: the
machine_id must be unique per process when several API replicas run.
"""

import threading
import time
from collections.abc import Callable

OFFER_PREFIX = "ofr"
COUNTER_OFFER_PREFIX = "cof"


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(
        self,
        machine_id: int = 0,
        time_ms: Callable[[], int] | None = None,
    ) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._time_ms = time_ms or (lambda: int(time.time() * 1000))
        self._sequence = 0
        self._last_timestamp_ms = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            ts = self._time_ms()
            # Clock went backwards: pin to the last issued millisecond so IDs stay ordered
            if ts < self._last_timestamp_ms:
                ts = self._last_timestamp_ms
            if ts == self._last_timestamp_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    ts = self._wait_next_ms(ts)
            else:
                self._sequence = 0

            self._last_timestamp_ms = ts
            return (
                ((ts - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self, prefix: str) -> str:
        return f"{prefix}_{self.next_int()}"

    def _wait_next_ms(self, last_ts: int) -> int:
        ts = self._time_ms()
        while ts <= last_ts:
            ts = self._time_ms()
        return ts


_default_generator = SnowflakeIdGenerator()


def generate_offer_id() -> str:
    return _default_generator.next_id(OFFER_PREFIX)


def generate_counter_offer_id() -> str:
    return _default_generator.next_id(COUNTER_OFFER_PREFIX)
