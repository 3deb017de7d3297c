from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .config import GateConfig, RevealLetter
from .keypad import is_data_digit
from .shuffle import RandomSource, SeededRng, shuffled
from .validation import is_arrangement_solved, is_password_complete, is_password_correct

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    LOCKED = "locked"
    PUZZLE_ACTIVE = "puzzle"
    PUZZLE_SOLVED = "revealed"


@dataclass(slots=True)
class GateState:
    """Everything the gate knows, as one plain record.

    Only ``SequenceGate`` event methods mutate it. ``to_dict``/``from_dict``
    give a JSON-friendly form for saving a session or seeding a test.
    """

    phase: Phase = Phase.LOCKED
    code: str = ""
    password_error: str | None = None
    tiles: list[int] = field(default_factory=list)
    drag_source: int | None = None
    puzzle_feedback: str | None = None
    reveal_step: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "code": self.code,
            "password_error": self.password_error,
            "tiles": list(self.tiles),
            "drag_source": self.drag_source,
            "puzzle_feedback": self.puzzle_feedback,
            "reveal_step": int(self.reveal_step),
        }

    @classmethod
    def from_dict(cls, data: object, *, config: GateConfig) -> "GateState":
        if not isinstance(data, dict):
            raise ValueError("state must be a mapping")
        try:
            phase = Phase(data.get("phase", Phase.LOCKED.value))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"unknown phase: {data.get('phase')!r}") from exc

        code = str(data.get("code", ""))
        if len(code) > config.max_digits or not all(is_data_digit(ch) for ch in code):
            raise ValueError("code must be at most max_digits digits")

        raw_tiles = data.get("tiles", [])
        if not isinstance(raw_tiles, list):
            raise ValueError("tiles must be a list")
        try:
            tiles = [int(t) for t in raw_tiles]
            reveal_step = int(data.get("reveal_step", 0))
            drag_source = data.get("drag_source")
            if drag_source is not None:
                drag_source = int(drag_source)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid state value: {exc}") from exc

        if phase is not Phase.LOCKED and sorted(tiles) != list(range(config.tile_count)):
            raise ValueError("tiles must be a permutation of the tile identifiers")
        if not (0 <= reveal_step <= config.reveal_ceiling):
            raise ValueError("reveal_step out of range")
        if drag_source is not None and not (0 <= drag_source < config.tile_count):
            raise ValueError("drag_source out of range")

        password_error = data.get("password_error")
        puzzle_feedback = data.get("puzzle_feedback")
        return cls(
            phase=phase,
            code=code,
            password_error=None if password_error is None else str(password_error),
            tiles=tiles,
            drag_source=drag_source,
            puzzle_feedback=None if puzzle_feedback is None else str(puzzle_feedback),
            reveal_step=reveal_step,
        )

    def copy(self) -> "GateState":
        return GateState(
            phase=self.phase,
            code=self.code,
            password_error=self.password_error,
            tiles=list(self.tiles),
            drag_source=self.drag_source,
            puzzle_feedback=self.puzzle_feedback,
            reveal_step=self.reveal_step,
        )


@dataclass(frozen=True, slots=True)
class TransitionEvent:
    index: int
    trigger: str
    from_phase: Phase
    to_phase: Phase


@dataclass(frozen=True, slots=True)
class GateSnapshot:
    """View model for the UI (pure data). The entered digits are never included."""

    title: str
    phase: Phase
    prompt: str
    hint: str
    code_length: int
    max_digits: int
    password_error: str | None
    tiles: tuple[int, ...]
    drag_source: int | None
    puzzle_feedback: str | None
    reveal_step: int
    reveal_ceiling: int
    letter: RevealLetter | None = None

    @property
    def has_password_error(self) -> bool:
        return self.password_error is not None

    @property
    def reveal_complete(self) -> bool:
        return self.phase is Phase.PUZZLE_SOLVED and self.reveal_step >= self.reveal_ceiling

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "phase": self.phase.value,
            "prompt": self.prompt,
            "hint": self.hint,
            "code_length": int(self.code_length),
            "max_digits": int(self.max_digits),
            "password_error": self.password_error,
            "tiles": list(self.tiles),
            "drag_source": self.drag_source,
            "puzzle_feedback": self.puzzle_feedback,
            "reveal_step": int(self.reveal_step),
            "reveal_ceiling": int(self.reveal_ceiling),
            "letter": None if self.letter is None else self.letter.to_dict(),
        }


class SequenceGate:
    """Password lock -> tile puzzle -> staged reveal.

    - Every event is total: out-of-phase or malformed input is a no-op that
      returns False.
    - Randomness only enters through the injected RNG when a puzzle is dealt.
    """

    def __init__(
        self,
        *,
        config: GateConfig,
        rng: RandomSource,
        state: GateState | None = None,
    ) -> None:
        self._config = config
        self._rng = rng
        self._events: list[TransitionEvent] = []
        if state is None:
            self._state = GateState()
        else:
            # Raises ValueError when the state does not fit this config.
            self._state = GateState.from_dict(state.to_dict(), config=config)

    @property
    def config(self) -> GateConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def state(self) -> GateState:
        return self._state.copy()

    def events(self) -> list[TransitionEvent]:
        return list(self._events)

    # Locked

    def press_digit(self, digit: str) -> bool:
        """Append one keypad symbol. Returns True if the code changed."""

        s = self._state
        if s.phase is not Phase.LOCKED:
            return False
        symbol = str(digit)
        # Reserved keys (* and #) and anything else that is not 0-9 fall through here.
        if not is_data_digit(symbol):
            return False
        if len(s.code) >= self._config.max_digits:
            return False

        s.code += symbol
        if not is_password_complete(s.code, self._config.max_digits):
            return True

        if is_password_correct(s.code, self._config.secret_code):
            self._enter_puzzle(trigger="password_accepted")
        else:
            # Code stays so it can be corrected with backspace.
            s.password_error = self._config.password_error_message
            logger.info("Password rejected")
        return True

    def press_backspace(self) -> bool:
        s = self._state
        if s.phase is not Phase.LOCKED:
            return False
        had_digit = s.code != ""
        changed = had_digit or s.password_error is not None
        s.password_error = None
        s.code = s.code[:-1]
        return changed

    # Puzzle

    def drag_start(self, slot: int) -> bool:
        s = self._state
        if s.phase is not Phase.PUZZLE_ACTIVE or not self._valid_slot(slot):
            return False
        s.drag_source = int(slot)
        s.puzzle_feedback = None
        return True

    def drop(self, slot: int) -> bool:
        """Swap the pending source with ``slot``. Returns True if a swap happened."""

        s = self._state
        if s.phase is not Phase.PUZZLE_ACTIVE:
            return False
        source = s.drag_source
        s.drag_source = None
        if source is None or not self._valid_slot(slot):
            return False
        target = int(slot)
        if source == target:
            return False
        s.tiles[source], s.tiles[target] = s.tiles[target], s.tiles[source]
        return True

    def drag_end(self) -> bool:
        s = self._state
        if s.phase is not Phase.PUZZLE_ACTIVE:
            return False
        had_source = s.drag_source is not None
        s.drag_source = None
        return had_source

    def press_done(self) -> bool:
        """Check the arrangement. Returns True if it was solved."""

        s = self._state
        if s.phase is not Phase.PUZZLE_ACTIVE:
            return False
        if is_arrangement_solved(s.tiles, self._config.tile_count):
            s.puzzle_feedback = None
            s.drag_source = None
            s.reveal_step = 0
            self._transition(Phase.PUZZLE_SOLVED, trigger="puzzle_solved")
            return True
        s.puzzle_feedback = self._config.puzzle_feedback_message
        logger.info("Arrangement not solved yet")
        return False

    def back_to_locked(self) -> bool:
        s = self._state
        if s.phase is not Phase.PUZZLE_ACTIVE:
            return False
        s.code = ""
        s.password_error = None
        s.drag_source = None
        s.puzzle_feedback = None
        self._transition(Phase.LOCKED, trigger="back_to_locked")
        return True

    # Reveal

    def advance_reveal(self) -> bool:
        s = self._state
        if s.phase is not Phase.PUZZLE_SOLVED:
            return False
        if s.reveal_step >= self._config.reveal_ceiling:
            return False
        s.reveal_step += 1
        return True

    def back_to_puzzle(self) -> bool:
        if self._state.phase is not Phase.PUZZLE_SOLVED:
            return False
        self._enter_puzzle(trigger="back_to_puzzle")
        return True

    def snapshot(self) -> GateSnapshot:
        s = self._state
        cfg = self._config
        in_puzzle = s.phase in (Phase.PUZZLE_ACTIVE, Phase.PUZZLE_SOLVED)
        letter = None
        if s.phase is Phase.PUZZLE_SOLVED and s.reveal_step >= cfg.reveal_ceiling:
            letter = cfg.letter
        return GateSnapshot(
            title=cfg.title,
            phase=s.phase,
            prompt=self._prompt_text(),
            hint=self._hint_text(),
            code_length=len(s.code),
            max_digits=cfg.max_digits,
            password_error=s.password_error,
            tiles=tuple(s.tiles) if in_puzzle else (),
            drag_source=s.drag_source,
            puzzle_feedback=s.puzzle_feedback,
            reveal_step=s.reveal_step,
            reveal_ceiling=cfg.reveal_ceiling,
            letter=letter,
        )

    def _prompt_text(self) -> str:
        phase = self._state.phase
        if phase is Phase.LOCKED:
            return self._config.title
        if phase is Phase.PUZZLE_ACTIVE:
            return self._config.puzzle_title
        return self._config.reveal_prompt(self._state.reveal_step)

    def _hint_text(self) -> str:
        phase = self._state.phase
        if phase is Phase.LOCKED:
            return self._config.password_hint
        if phase is Phase.PUZZLE_ACTIVE:
            return self._config.puzzle_hint
        return ""

    def _valid_slot(self, slot: object) -> bool:
        if isinstance(slot, bool) or not isinstance(slot, int):
            return False
        return 0 <= slot < self._config.tile_count

    def _enter_puzzle(self, *, trigger: str) -> None:
        s = self._state
        s.code = ""
        s.password_error = None
        s.tiles = shuffled(range(self._config.tile_count), self._rng)
        s.drag_source = None
        s.puzzle_feedback = None
        s.reveal_step = 0
        self._transition(Phase.PUZZLE_ACTIVE, trigger=trigger)

    def _transition(self, to_phase: Phase, *, trigger: str) -> None:
        from_phase = self._state.phase
        self._state.phase = to_phase
        self._events.append(
            TransitionEvent(
                index=len(self._events),
                trigger=trigger,
                from_phase=from_phase,
                to_phase=to_phase,
            )
        )
        logger.info("Gate %s -> %s (%s)", from_phase.value, to_phase.value, trigger)


def build_sequence_gate(
    *,
    seed: int,
    config: GateConfig | None = None,
    state: GateState | None = None,
) -> SequenceGate:
    return SequenceGate(
        config=GateConfig() if config is None else config,
        rng=SeededRng(int(seed)),
        state=state,
    )
