"""Settings validation for values that are persisted on orders."""
from decimal import Decimal

import pydantic
import pytest

from config.settings import Settings


def test_commission_rate_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("COMMISSION_RATE", raising=False)
    assert Settings().COMMISSION_RATE == Decimal("0.075")


def test_commission_rate_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMMISSION_RATE", "0.0825")
    assert Settings().COMMISSION_RATE == Decimal("0.0825")


@pytest.mark.parametrize("rate", ["0.07525", "1", "-0.01"])
def test_commission_rate_rejected(monkeypatch: pytest.MonkeyPatch, rate: str) -> None:
    monkeypatch.setenv("COMMISSION_RATE", rate)
    with pytest.raises(pydantic.ValidationError):
        Settings()
