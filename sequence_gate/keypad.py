from __future__ import annotations

from dataclasses import dataclass

DATA_DIGITS = "0123456789"
RESERVED_SYMBOLS = frozenset({"*", "#"})


@dataclass(frozen=True, slots=True)
class KeypadKey:
    symbol: str
    letters: str = ""

    @property
    def enabled(self) -> bool:
        return self.symbol not in RESERVED_SYMBOLS


# Phone layout, row-major, 3 columns.
KEYPAD_LAYOUT: tuple[KeypadKey, ...] = (
    KeypadKey("1"),
    KeypadKey("2", "ABC"),
    KeypadKey("3", "DEF"),
    KeypadKey("4", "GHI"),
    KeypadKey("5", "JKL"),
    KeypadKey("6", "MNO"),
    KeypadKey("7", "PQRS"),
    KeypadKey("8", "TUV"),
    KeypadKey("9", "WXYZ"),
    KeypadKey("*"),
    KeypadKey("0", "+"),
    KeypadKey("#"),
)

KEYPAD_COLUMNS = 3


def is_data_digit(symbol: str) -> bool:
    return len(symbol) == 1 and symbol in DATA_DIGITS


def is_reserved_symbol(symbol: str) -> bool:
    return symbol in RESERVED_SYMBOLS
