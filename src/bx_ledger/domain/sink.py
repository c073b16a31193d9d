"""LedgerSinkProtocol — money movements the settlement engine reports.

The engine calls these only after its own transaction has committed. An
implementation may raise; the engine logs and swallows the failure because the
committed order state is the record of fact.
"""

from decimal import Decimal
from typing import Protocol


class LedgerSinkProtocol(Protocol):
    async def hold_funds(self, order_id: str, buyer_id: str, amount: Decimal) -> None: ...

    async def release_funds(self, order_id: str, seller_id: str, amount: Decimal) -> None: ...

    async def record_commission(self, order_id: str, amount: Decimal) -> None: ...

    async def refund_funds(self, order_id: str, buyer_id: str, amount: Decimal) -> None: ...
