from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SEQUENCE_GATE_CONFIG"

DEFAULT_SECRET_CODE = "456838"
MAX_DIGITS = 6
TILE_COUNT = 9
REVEAL_CEILING = 2


@dataclass(frozen=True, slots=True)
class RevealLetter:
    salutation: str
    paragraphs: tuple[str, ...]
    signature: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "salutation": self.salutation,
            "paragraphs": list(self.paragraphs),
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: object) -> "RevealLetter":
        if not isinstance(data, dict):
            return DEFAULT_LETTER
        raw_paragraphs = data.get("paragraphs")
        if isinstance(raw_paragraphs, list):
            paragraphs = tuple(str(p) for p in raw_paragraphs)
        else:
            paragraphs = DEFAULT_LETTER.paragraphs
        return cls(
            salutation=str(data.get("salutation", DEFAULT_LETTER.salutation)),
            paragraphs=paragraphs,
            signature=str(data.get("signature", DEFAULT_LETTER.signature)),
        )


DEFAULT_LETTER = RevealLetter(
    salutation="To my dearest,",
    paragraphs=(
        "You found the code and put every piece back where it belongs.",
        "Happy Valentine's Day. With all my love, now and ever.",
    ),
    signature="Yours, always",
)


@dataclass(frozen=True, slots=True)
class GateConfig:
    """Fixed parameters and copy for one gate session.

    Frozen: nothing here changes while the gate is running.
    """

    secret_code: str = DEFAULT_SECRET_CODE
    max_digits: int = MAX_DIGITS
    tile_count: int = TILE_COUNT
    reveal_ceiling: int = REVEAL_CEILING

    title: str = "Happy Valentine's Day!"
    password_hint: str = "Guess the password. Hint: what you do."
    password_error_message: str = "Wrong password. Try again."
    puzzle_title: str = "Finish the puzzle"
    puzzle_hint: str = "Drag pieces to swap them. Arrange the image, then click Done."
    puzzle_feedback_message: str = "Not quite! Keep trying."
    reveal_prompts: tuple[str, ...] = ("Tap the envelope", "Tap again", "")
    letter: RevealLetter = DEFAULT_LETTER

    def __post_init__(self) -> None:
        if self.max_digits <= 0:
            raise ValueError("max_digits must be > 0")
        if len(self.secret_code) != self.max_digits:
            raise ValueError("secret_code length must equal max_digits")
        if any(ch not in "0123456789" for ch in self.secret_code):
            raise ValueError("secret_code must contain only the digits 0-9")
        if self.tile_count <= 0 or math.isqrt(self.tile_count) ** 2 != self.tile_count:
            raise ValueError("tile_count must be a positive perfect square")
        if self.reveal_ceiling < 0:
            raise ValueError("reveal_ceiling must be >= 0")

    @property
    def grid_side(self) -> int:
        return math.isqrt(self.tile_count)

    def reveal_prompt(self, step: int) -> str:
        if 0 <= step < len(self.reveal_prompts):
            return self.reveal_prompts[step]
        return ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "secret_code": self.secret_code,
            "max_digits": int(self.max_digits),
            "tile_count": int(self.tile_count),
            "reveal_ceiling": int(self.reveal_ceiling),
            "title": self.title,
            "password_hint": self.password_hint,
            "password_error_message": self.password_error_message,
            "puzzle_title": self.puzzle_title,
            "puzzle_hint": self.puzzle_hint,
            "puzzle_feedback_message": self.puzzle_feedback_message,
            "reveal_prompts": list(self.reveal_prompts),
            "letter": self.letter.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: object) -> "GateConfig":
        """Build a config from parsed JSON. Missing keys keep their defaults.

        Raises ValueError when a present value is out of range.
        """

        if not isinstance(data, dict):
            raise ValueError("config must be a JSON object")
        defaults = cls()
        secret = str(data.get("secret_code", defaults.secret_code)).strip()
        max_digits = data.get("max_digits", len(secret))

        raw_prompts = data.get("reveal_prompts")
        if isinstance(raw_prompts, list):
            prompts = tuple(str(p) for p in raw_prompts)
        else:
            prompts = defaults.reveal_prompts

        try:
            return cls(
                secret_code=secret,
                max_digits=int(max_digits),
                tile_count=int(data.get("tile_count", defaults.tile_count)),
                reveal_ceiling=int(data.get("reveal_ceiling", defaults.reveal_ceiling)),
                title=str(data.get("title", defaults.title)),
                password_hint=str(data.get("password_hint", defaults.password_hint)),
                password_error_message=str(
                    data.get("password_error_message", defaults.password_error_message)
                ),
                puzzle_title=str(data.get("puzzle_title", defaults.puzzle_title)),
                puzzle_hint=str(data.get("puzzle_hint", defaults.puzzle_hint)),
                puzzle_feedback_message=str(
                    data.get("puzzle_feedback_message", defaults.puzzle_feedback_message)
                ),
                reveal_prompts=prompts,
                letter=RevealLetter.from_dict(data.get("letter")),
            )
        except TypeError as exc:
            raise ValueError(f"invalid config value: {exc}") from exc


def default_config_path() -> Path | None:
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return None


def load_gate_config(path: Path | None) -> GateConfig:
    """Load a config file, falling back to defaults when absent or invalid."""

    if path is None or not path.exists():
        return GateConfig()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        config = GateConfig.from_dict(payload)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring gate config %s: %s", path, exc)
        return GateConfig()
    logger.info("Loaded gate config from %s", path)
    return config
