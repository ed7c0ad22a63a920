from __future__ import annotations

import pytest

from sightline.budget import BudgetExhausted, GasMeter, UnboundedClock, clock_for_limit
from sightline.exceptions import NeverThrown


def test_gas_meter_exhausts_past_limit() -> None:
    meter = GasMeter(limit=2)
    meter.consume()
    meter.consume()
    assert meter.get_mark() == 2
    with pytest.raises(BudgetExhausted):
        meter.consume()


def test_gas_meter_rejects_invalid_inputs() -> None:
    with pytest.raises(NeverThrown):
        GasMeter(limit=0)
    with pytest.raises(NeverThrown):
        GasMeter(limit=2, current=-1)
    meter = GasMeter(limit=2)
    with pytest.raises(NeverThrown):
        meter.consume(0)


def test_clock_for_limit() -> None:
    unbounded = clock_for_limit(None)
    assert isinstance(unbounded, UnboundedClock)
    unbounded.consume(1_000_000)
    assert unbounded.get_mark() == 1_000_000
    assert isinstance(clock_for_limit(3), GasMeter)
