"""Pygame UI shell for the sequence gate.

Three screens in one: a phone keypad lock, a 3x3 swap puzzle and an envelope
that opens in steps. All gate rules live in sequence_gate.gate_core; this
module only maps pygame input to gate events and draws snapshots.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .config import GateConfig, default_config_path, load_gate_config
from .gate_core import GateSnapshot, Phase, SequenceGate, build_sequence_gate
from .keypad import KEYPAD_COLUMNS, KEYPAD_LAYOUT

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 640)
TARGET_FPS = 60

BG = (58, 14, 34)
CARD_BG = (255, 240, 245)
CARD_BORDER = (214, 120, 150)
TEXT_MAIN = (70, 20, 40)
TEXT_MUTED = (140, 90, 110)
ACCENT = (214, 51, 108)
ERROR = (200, 30, 50)
KEY_BG = (250, 222, 232)
KEY_DISABLED = (232, 214, 220)


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


@dataclass(slots=True)
class _PointerDrag:
    slot: int
    pos: tuple[int, int]


class GateScreen:
    def __init__(self, app: App, *, gate_factory: Callable[[], SequenceGate]) -> None:
        self._app = app
        self._gate = gate_factory()

        self._title_font = pygame.font.Font(None, 46)
        self._body_font = pygame.font.Font(None, 28)
        self._small_font = pygame.font.Font(None, 22)
        self._tile_font = pygame.font.Font(None, 56)

        # Hitboxes are refreshed on every render.
        self._key_hitboxes: list[tuple[pygame.Rect, str]] = []
        self._backspace_hitbox: pygame.Rect | None = None
        self._slot_hitboxes: list[pygame.Rect] = []
        self._done_hitbox: pygame.Rect | None = None
        self._back_hitbox: pygame.Rect | None = None
        self._envelope_hitbox: pygame.Rect | None = None

        # Keyboard reordering cursor and the in-flight mouse drag.
        self._cursor = 0
        self._pointer: _PointerDrag | None = None

    def handle_event(self, event: pygame.event.Event) -> None:
        phase = self._gate.phase
        if phase is Phase.LOCKED:
            self._handle_locked(event)
        elif phase is Phase.PUZZLE_ACTIVE:
            self._handle_puzzle(event)
        else:
            self._handle_reveal(event)
        if self._gate.phase is not Phase.PUZZLE_ACTIVE:
            # A held mouse drag does not survive leaving the puzzle.
            self._pointer = None

    def _handle_locked(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._app.quit()
            elif event.key == pygame.K_BACKSPACE:
                self._gate.press_backspace()
            else:
                symbol = getattr(event, "unicode", "")
                if symbol:
                    self._gate.press_digit(symbol)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._backspace_hitbox is not None and self._backspace_hitbox.collidepoint(event.pos):
                self._gate.press_backspace()
                return
            for rect, symbol in self._key_hitboxes:
                if rect.collidepoint(event.pos):
                    self._gate.press_digit(symbol)
                    return

    def _handle_puzzle(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_puzzle_key(event.key)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._back_hitbox is not None and self._back_hitbox.collidepoint(event.pos):
                self._pointer = None
                self._gate.back_to_locked()
                return
            if self._done_hitbox is not None and self._done_hitbox.collidepoint(event.pos):
                self._gate.press_done()
                return
            slot = self._slot_at(event.pos)
            if slot is not None and self._gate.drag_start(slot):
                self._pointer = _PointerDrag(slot=slot, pos=event.pos)
                self._cursor = slot
            return

        if event.type == pygame.MOUSEMOTION and self._pointer is not None:
            self._pointer.pos = event.pos
            return

        if event.type == pygame.MOUSEBUTTONUP and event.button == 1 and self._pointer is not None:
            self._pointer = None
            slot = self._slot_at(event.pos)
            if slot is not None:
                self._gate.drop(slot)
                self._cursor = slot
            self._gate.drag_end()

    def _handle_puzzle_key(self, key: int) -> None:
        side = self._gate.config.grid_side
        count = self._gate.config.tile_count
        if key in (pygame.K_LEFT, pygame.K_a):
            self._cursor = (self._cursor - 1) % count
        elif key in (pygame.K_RIGHT, pygame.K_d):
            self._cursor = (self._cursor + 1) % count
        elif key in (pygame.K_UP, pygame.K_w):
            self._cursor = (self._cursor - side) % count
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._cursor = (self._cursor + side) % count
        elif key == pygame.K_SPACE:
            if self._gate.snapshot().drag_source is None:
                self._gate.drag_start(self._cursor)
            else:
                self._gate.drop(self._cursor)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._gate.drag_end()
            self._gate.press_done()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._gate.snapshot().drag_source is not None:
                # First Escape cancels a pick-up, second one leaves.
                self._gate.drag_end()
            else:
                self._gate.back_to_locked()

    def _handle_reveal(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_KP_ENTER):
                self._gate.advance_reveal()
            elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._back_to_puzzle()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._back_hitbox is not None and self._back_hitbox.collidepoint(event.pos):
                self._back_to_puzzle()
            elif self._envelope_hitbox is not None and self._envelope_hitbox.collidepoint(event.pos):
                self._gate.advance_reveal()

    def _back_to_puzzle(self) -> None:
        if self._gate.back_to_puzzle():
            self._cursor = 0
            self._pointer = None

    def _slot_at(self, pos: tuple[int, int]) -> int | None:
        for idx, rect in enumerate(self._slot_hitboxes):
            if rect.collidepoint(pos):
                return idx
        return None

    # Rendering

    def render(self, surface: pygame.Surface) -> None:
        snap = self._gate.snapshot()
        surface.fill(BG)

        w, h = surface.get_size()
        card = pygame.Rect(0, 0, min(w - 40, 620), h - 40)
        card.center = (w // 2, h // 2)
        pygame.draw.rect(surface, CARD_BG, card, border_radius=18)
        pygame.draw.rect(surface, CARD_BORDER, card, 2, border_radius=18)

        self._key_hitboxes = []
        self._backspace_hitbox = None
        self._slot_hitboxes = []
        self._done_hitbox = None
        self._back_hitbox = None
        self._envelope_hitbox = None

        if snap.phase is Phase.LOCKED:
            self._render_locked(surface, card, snap)
        elif snap.phase is Phase.PUZZLE_ACTIVE:
            self._render_puzzle(surface, card, snap)
        else:
            self._render_reveal(surface, card, snap)

    def _render_header(self, surface: pygame.Surface, card: pygame.Rect, snap: GateSnapshot, top: int) -> int:
        if snap.prompt:
            title = self._title_font.render(snap.prompt, True, TEXT_MAIN)
            surface.blit(title, title.get_rect(midtop=(card.centerx, top)))
            top += title.get_height() + 8
        if snap.hint:
            for line in _wrap_text(self._small_font, snap.hint, card.w - 60):
                text = self._small_font.render(line, True, TEXT_MUTED)
                surface.blit(text, text.get_rect(midtop=(card.centerx, top)))
                top += text.get_height() + 2
        return top + 10

    def _render_back_button(self, surface: pygame.Surface, card: pygame.Rect) -> None:
        rect = pygame.Rect(card.x + 14, card.y + 14, 90, 32)
        pygame.draw.rect(surface, KEY_BG, rect, border_radius=8)
        label = self._small_font.render("< Back", True, TEXT_MAIN)
        surface.blit(label, label.get_rect(center=rect.center))
        self._back_hitbox = rect

    def _render_locked(self, surface: pygame.Surface, card: pygame.Rect, snap: GateSnapshot) -> None:
        heart = self._title_font.render("<3", True, ACCENT)
        surface.blit(heart, heart.get_rect(midtop=(card.centerx, card.y + 18)))
        y = self._render_header(surface, card, snap, card.y + 18 + heart.get_height() + 6)

        # Dots only; the digits themselves are not part of the snapshot.
        dot_r = 9
        gap = 14
        total_w = snap.max_digits * dot_r * 2 + (snap.max_digits - 1) * gap
        x = card.centerx - total_w // 2 + dot_r
        for i in range(snap.max_digits):
            center = (x + i * (dot_r * 2 + gap), y + dot_r)
            if i < snap.code_length:
                pygame.draw.circle(surface, ACCENT, center, dot_r)
            else:
                pygame.draw.circle(surface, CARD_BORDER, center, dot_r, 2)
        y += dot_r * 2 + 10

        if snap.password_error:
            err = self._small_font.render(snap.password_error, True, ERROR)
            surface.blit(err, err.get_rect(midtop=(card.centerx, y)))
        y += 26

        rows = (len(KEYPAD_LAYOUT) + KEYPAD_COLUMNS - 1) // KEYPAD_COLUMNS + 1
        key_h = max(36, min(64, (card.bottom - 16 - y) // rows - 8))
        key_w = key_h + 36
        grid_w = KEYPAD_COLUMNS * key_w + (KEYPAD_COLUMNS - 1) * 10
        left = card.centerx - grid_w // 2

        for idx, key in enumerate(KEYPAD_LAYOUT):
            row, col = divmod(idx, KEYPAD_COLUMNS)
            rect = pygame.Rect(left + col * (key_w + 10), y + row * (key_h + 8), key_w, key_h)
            pygame.draw.rect(surface, KEY_BG if key.enabled else KEY_DISABLED, rect, border_radius=12)
            digit = self._app.font.render(key.symbol, True, TEXT_MAIN if key.enabled else TEXT_MUTED)
            if key.letters:
                surface.blit(digit, digit.get_rect(midbottom=(rect.centerx, rect.centery + 6)))
                letters = self._small_font.render(key.letters, True, TEXT_MUTED)
                surface.blit(letters, letters.get_rect(midtop=(rect.centerx, rect.centery + 6)))
            else:
                surface.blit(digit, digit.get_rect(center=rect.center))
            self._key_hitboxes.append((rect, key.symbol))

        row = (len(KEYPAD_LAYOUT) + KEYPAD_COLUMNS - 1) // KEYPAD_COLUMNS
        back = pygame.Rect(left + 2 * (key_w + 10), y + row * (key_h + 8), key_w, key_h)
        pygame.draw.rect(surface, KEY_BG, back, border_radius=12)
        label = self._body_font.render("DEL", True, TEXT_MAIN)
        surface.blit(label, label.get_rect(center=back.center))
        self._backspace_hitbox = back

    def _render_puzzle(self, surface: pygame.Surface, card: pygame.Rect, snap: GateSnapshot) -> None:
        self._render_back_button(surface, card)
        y = self._render_header(surface, card, snap, card.y + 54)

        side = self._gate.config.grid_side
        footer_h = 90
        grid_size = max(120, min(card.w - 80, card.bottom - footer_h - y))
        cell = grid_size // side
        grid = pygame.Rect(0, y, cell * side, cell * side)
        grid.centerx = card.centerx

        dragging = self._pointer.slot if self._pointer is not None else None
        for slot, tile in enumerate(snap.tiles):
            row, col = divmod(slot, side)
            rect = pygame.Rect(grid.x + col * cell, grid.y + row * cell, cell, cell)
            self._slot_hitboxes.append(rect)
            if slot == dragging:
                pygame.draw.rect(surface, KEY_DISABLED, rect.inflate(-4, -4))
            else:
                self._draw_tile(surface, rect.inflate(-4, -4), tile, side)
            if slot == snap.drag_source:
                pygame.draw.rect(surface, ACCENT, rect.inflate(-2, -2), 4)
            elif slot == self._cursor:
                pygame.draw.rect(surface, TEXT_MAIN, rect.inflate(-2, -2), 2)

        if self._pointer is not None and dragging is not None and dragging < len(snap.tiles):
            ghost = pygame.Rect(0, 0, cell - 8, cell - 8)
            ghost.center = self._pointer.pos
            self._draw_tile(surface, ghost, snap.tiles[dragging], side)

        y = grid.bottom + 10
        if snap.puzzle_feedback:
            fb = self._body_font.render(snap.puzzle_feedback, True, ERROR)
            surface.blit(fb, fb.get_rect(midtop=(card.centerx, y)))
        done = pygame.Rect(0, 0, 140, 40)
        done.midbottom = (card.centerx, card.bottom - 14)
        pygame.draw.rect(surface, ACCENT, done, border_radius=10)
        label = self._body_font.render("Done", True, CARD_BG)
        surface.blit(label, label.get_rect(center=done.center))
        self._done_hitbox = done

    def _draw_tile(self, surface: pygame.Surface, rect: pygame.Rect, tile: int, side: int) -> None:
        # Procedural picture: a diagonal gradient that only lines up when solved.
        row, col = divmod(int(tile), side)
        span = max(1, 2 * (side - 1))
        t = (row + col) / span
        color = (
            int(240 - 60 * t),
            int(150 - 100 * t),
            int(180 - 40 * t),
        )
        pygame.draw.rect(surface, color, rect)
        label = self._tile_font.render(str(int(tile) + 1), True, CARD_BG)
        surface.blit(label, label.get_rect(center=rect.center))

    def _render_reveal(self, surface: pygame.Surface, card: pygame.Rect, snap: GateSnapshot) -> None:
        self._render_back_button(surface, card)
        y = self._render_header(surface, card, snap, card.y + 54)

        env = pygame.Rect(0, 0, 260, 160)
        env.midtop = (card.centerx, y + 10)
        self._envelope_hitbox = env
        pygame.draw.rect(surface, KEY_BG, env)
        pygame.draw.rect(surface, CARD_BORDER, env, 2)
        if snap.reveal_step >= 1:
            flap = [env.topleft, env.topright, (env.centerx, env.top - 70)]
        else:
            flap = [env.topleft, env.topright, (env.centerx, env.centery)]
        pygame.draw.polygon(surface, (240, 190, 208), flap)
        pygame.draw.polygon(surface, CARD_BORDER, flap, 2)
        pygame.draw.circle(surface, ACCENT, env.center, 16)

        if snap.letter is None:
            return
        note = pygame.Rect(card.x + 30, env.bottom + 16, card.w - 60, card.bottom - env.bottom - 30)
        pygame.draw.rect(surface, (255, 252, 250), note, border_radius=10)
        pygame.draw.rect(surface, CARD_BORDER, note, 1, border_radius=10)
        ty = note.y + 12
        lines: list[tuple[str, tuple[int, int, int]]] = [(snap.letter.salutation, ACCENT)]
        for paragraph in snap.letter.paragraphs:
            lines.extend((line, TEXT_MAIN) for line in _wrap_text(self._small_font, paragraph, note.w - 24))
        lines.append((snap.letter.signature, TEXT_MUTED))
        for text, color in lines:
            if ty + self._small_font.get_height() > note.bottom - 8:
                break
            rendered = self._small_font.render(text, True, color)
            surface.blit(rendered, (note.x + 12, ty))
            ty += rendered.get_height() + 4


def _wrap_text(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    words = text.split()
    if not words:
        return []
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if font.size(candidate)[0] <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: GateConfig | None = None,
) -> int:
    configure_logging()
    if config is None:
        config = load_gate_config(default_config_path())

    pygame.init()
    pygame.display.set_caption(config.title)
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    seed = _new_seed()
    logger.info("Starting sequence gate session")
    app.push(GateScreen(app, gate_factory=lambda: build_sequence_gate(seed=seed, config=config)))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
