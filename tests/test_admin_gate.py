import pytest

from till_pricing.exceptions import TillError
from till_pricing.services.admin_gate import AdminGate


def test_open_without_pin_is_authorised():
    gate = AdminGate()
    gate.open(pin_enabled=False)
    assert gate.is_open and gate.authorised


def test_pin_required_when_enabled():
    gate = AdminGate()
    gate.open(pin_enabled=True)
    assert not gate.authorised

    with pytest.raises(TillError) as exc:
        gate.try_pin("0000", "1234")
    assert exc.value.code == "WRONG_PIN"
    assert not gate.authorised

    assert gate.try_pin("1234", "1234")
    gate.require_authorised()


def test_close_locks_again():
    gate = AdminGate()
    gate.open(pin_enabled=False)
    gate.close()

    assert not gate.is_open
    with pytest.raises(TillError) as exc:
        gate.require_authorised()
    assert exc.value.code == "ADMIN_LOCKED"
