"""Identifiers for orders and the references shown to people.

Order ids are 64-bit snowflakes rendered as decimal strings:

    | 41 bits ms since BX_EPOCH | 10 bits node | 12 bits sequence |

They increase with time, which is what the "id < :cursor" pagination relies on.
Transaction references (TXN-<epoch ms>-<9 base36>) are for receipts and
support tickets, never used as keys.
"""

import secrets
import string
import threading
import time

from config.settings import settings
from src.bx_common.clock import epoch_ms

BX_EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z

_NODE_BITS = 10
_SEQ_BITS = 12
_SEQ_MASK = (1 << _SEQ_BITS) - 1
_REF_ALPHABET = string.digits + string.ascii_uppercase
_REF_SUFFIX_LEN = 9


class SnowflakeIdGenerator:
    def __init__(self, node_id: int = 0) -> None:
        if not 0 <= node_id < (1 << _NODE_BITS):
            raise ValueError(f"node_id must be in [0, {(1 << _NODE_BITS) - 1}], got {node_id}")
        self._node_id = node_id
        self._lock = threading.Lock()
        self._last_ms = -1
        self._seq = 0

    def next_id(self) -> str:
        with self._lock:
            now = time.time_ns() // 1_000_000
            if now < self._last_ms:
                # Clock stepped backwards: keep issuing from the last tick
                now = self._last_ms
            if now == self._last_ms:
                self._seq = (self._seq + 1) & _SEQ_MASK
                if self._seq == 0:
                    while now <= self._last_ms:
                        now = time.time_ns() // 1_000_000
            else:
                self._seq = 0
            self._last_ms = now
            value = (
                (now - BX_EPOCH_MS) << (_NODE_BITS + _SEQ_BITS)
                | self._node_id << _SEQ_BITS
                | self._seq
            )
        return str(value)


_generator = SnowflakeIdGenerator(settings.NODE_ID)


def generate_id() -> str:
    return _generator.next_id()


def generate_transaction_ref() -> str:
    suffix = "".join(secrets.choice(_REF_ALPHABET) for _ in range(_REF_SUFFIX_LEN))
    return f"TXN-{epoch_ms()}-{suffix}"
