from __future__ import annotations

from sequence_gate.keypad import KEYPAD_COLUMNS, KEYPAD_LAYOUT, is_data_digit, is_reserved_symbol


def test_layout_is_a_phone_keypad() -> None:
    assert len(KEYPAD_LAYOUT) == 12
    assert len(KEYPAD_LAYOUT) % KEYPAD_COLUMNS == 0
    assert [k.symbol for k in KEYPAD_LAYOUT] == list("123456789*0#")
    assert {k.symbol: k.letters for k in KEYPAD_LAYOUT}["7"] == "PQRS"


def test_reserved_keys_are_disabled() -> None:
    disabled = [k.symbol for k in KEYPAD_LAYOUT if not k.enabled]
    assert disabled == ["*", "#"]
    assert all(is_reserved_symbol(s) for s in disabled)


def test_data_digit_classification() -> None:
    assert all(is_data_digit(d) for d in "0123456789")
    for s in ("*", "#", "", "12", "a", "²", "٣"):
        assert is_data_digit(s) is False
