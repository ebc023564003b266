import pytest

from exceptions import InvalidInput
from vault import adjust_vault, apply_vault_operation, get_vault_total


def test_add_and_subtract():
    assert apply_vault_operation(500, "add", 250) == 750
    assert apply_vault_operation(500, "subtract", 200) == 300


def test_subtract_clamps_at_zero():
    assert apply_vault_operation(500, "subtract", 700) == 0


@pytest.mark.parametrize("value", [0, -5, "abc", None, float("nan")])
def test_rejects_non_positive_or_non_numeric(value):
    with pytest.raises(InvalidInput):
        apply_vault_operation(100, "add", value)


def test_rejects_unknown_operation():
    with pytest.raises(InvalidInput):
        apply_vault_operation(100, "multiply", 2)


def test_persisted_vault(db):
    assert get_vault_total(db) == 0
    assert adjust_vault(db, "add", 500) == 500
    assert adjust_vault(db, "subtract", 700) == 0
    assert adjust_vault(db, "add", "125.5") == 125.5
    assert get_vault_total(db) == 125.5


def test_invalid_adjustment_leaves_total(db):
    adjust_vault(db, "add", 300)
    with pytest.raises(InvalidInput):
        adjust_vault(db, "subtract", -1)
    assert get_vault_total(db) == 300
