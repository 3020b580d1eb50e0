"""
Main game window using pygame.

Hosts the four screens (start, leaderboard, game, game over), feeds
pointer input and frame timestamps into the GameSession, and shows the
leaderboard outcome when a submission finishes.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import pygame

from popcorn.animation.particles import EffectLayer
from popcorn.core.events import Event, EventBus, EventType
from popcorn.errors import StoreUnavailable, ValidationError
from popcorn.game.models import PlayField
from popcorn.game.session import GameSession
from popcorn.graphics.assets import AssetCache
from popcorn.graphics.renderer import GameRenderer
from popcorn.leaderboard.models import ScoreEntry
from popcorn.leaderboard.sync import LeaderboardSync
from popcorn.utils.profile import PlayerProfile, Skin

logger = logging.getLogger(__name__)

HINT_DURATION_MS = 2000
TOAST_DURATION_MS = 2500


class Screen(Enum):
    """Top-level screens."""
    START = auto()
    BOARD = auto()
    GAME = auto()
    OVER = auto()


class BoardState(Enum):
    """Leaderboard screen contents."""
    LOADING = auto()
    READY = auto()
    ERROR = auto()


@dataclass
class WindowConfig:
    """Game window configuration."""
    width: int = 420
    height: int = 720
    title: str = "Popcorn Catcher"
    fps: int = 60
    pixel_ratio: float = 1.0

    # Colors
    bg_color: tuple[int, int, int] = (18, 16, 28)
    text_color: tuple[int, int, int] = (235, 230, 245)
    muted_color: tuple[int, int, int] = (150, 145, 170)
    accent_color: tuple[int, int, int] = (255, 215, 130)
    ok_color: tuple[int, int, int] = (182, 240, 192)
    error_color: tuple[int, int, int] = (255, 155, 155)


class GameWindow:
    """
    Desktop window running the catch game.

    Controls:
        Mouse / touch: hold and drag to move the bucket
        START: type your name, LEFT/RIGHT to pick a skin,
               RETURN to play, TAB for the leaderboard
        OVER: RETURN to replay, TAB for the leaderboard, ESC for home
        BOARD: ESC or BACKSPACE to go back
        F1: Toggle log panel
        ESC on the start screen: Exit
    """

    def __init__(
        self,
        leaderboard: LeaderboardSync,
        assets: AssetCache,
        skins: list[Skin],
        profile: PlayerProfile,
        profile_path: Path,
        config: WindowConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config or WindowConfig()
        self.event_bus = event_bus or EventBus()
        self.leaderboard = leaderboard
        self.assets = assets
        self.skins = skins
        self.profile = profile
        self.profile_path = profile_path

        ratio = self.config.pixel_ratio
        self.field = PlayField(
            width=round(self.config.width * ratio),
            height=round(self.config.height * ratio),
            ratio=ratio,
        )
        self.session = GameSession(self.field, event_bus=self.event_bus, leaderboard=leaderboard)
        self.renderer = GameRenderer(self.field, assets)
        self.effects = EffectLayer(ratio=ratio)

        self.screen = Screen.START
        self._skin_index = self._find_skin(profile.skin)
        if self._skin_index < 0:
            self.profile.skin = ""  # Saved skin no longer installed

        # Pygame setup
        self._surface: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None
        self._running = False
        self._frame_count = 0

        # Screen state
        self._game_started_at = 0
        self._toast: Optional[str] = None
        self._toast_until = 0
        self._final_score = 0
        self._save_status: Optional[tuple[str, tuple[int, int, int]]] = None
        self._awaiting_save: Optional[int] = None  # Session id
        self._board_state = BoardState.LOADING
        self._board_rows: list[ScoreEntry] = []
        self._board_task: Optional[asyncio.Task] = None

        # Log viewer
        self._show_log = False
        self._log_buffer: list[str] = []
        self._max_log_lines = 12
        self._setup_log_capture()

        self.event_bus.subscribe(EventType.OBJECT_CAUGHT, self._on_object_caught)
        self.event_bus.subscribe(EventType.SESSION_ENDED, self._on_session_ended)
        self.event_bus.subscribe(EventType.SCORE_SAVED, self._on_save_result)
        self.event_bus.subscribe(EventType.SCORE_SAVE_FAILED, self._on_save_result)

        logger.info("GameWindow created")

    def _setup_log_capture(self) -> None:
        """Setup log capturing for the log viewer."""
        class WindowLogHandler(logging.Handler):
            def __init__(self, window: 'GameWindow'):
                super().__init__()
                self.window = window

            def emit(self, record):
                msg = self.format(record)
                self.window._log_buffer.append(msg)
                if len(self.window._log_buffer) > self.window._max_log_lines * 2:
                    self.window._log_buffer = self.window._log_buffer[-self.window._max_log_lines:]

        self._log_handler = WindowLogHandler(self)
        self._log_handler.setFormatter(logging.Formatter('%(levelname).1s %(name)s: %(message)s'))
        logging.getLogger().addHandler(self._log_handler)

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)
        self._surface = pygame.display.set_mode(
            (self.config.width, self.config.height),
            pygame.DOUBLEBUF,
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._font = pygame.font.SysFont("DejaVu Sans,Arial", 20)
        self._big_font = pygame.font.SysFont("DejaVu Sans,Arial", 44, bold=True)
        self._small_font = pygame.font.SysFont("DejaVu Sans,Arial", 14)

        pygame.key.start_text_input()
        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    # Profile helpers

    def _find_skin(self, file_name: str) -> int:
        for index, skin in enumerate(self.skins):
            if skin.file == file_name:
                return index
        return -1

    def _select_skin(self, step: int) -> None:
        if not self.skins:
            return
        if self._skin_index < 0:
            self._skin_index = 0 if step > 0 else len(self.skins) - 1
        else:
            self._skin_index = (self._skin_index + step) % len(self.skins)
        self.profile.skin = self.skins[self._skin_index].file
        self._save_profile()

    def _save_profile(self) -> None:
        try:
            self.profile.save(self.profile_path)
        except OSError as e:
            logger.warning(f"Could not save profile: {e}")

    def _show_toast(self, message: str) -> None:
        self._toast = message
        self._toast_until = pygame.time.get_ticks() + TOAST_DURATION_MS

    # Screen flow

    def show_start(self) -> None:
        self.session.stop()
        self.screen = Screen.START

    def show_board(self) -> None:
        self.session.stop()
        self.screen = Screen.BOARD
        self._board_state = BoardState.LOADING
        self._board_rows = []
        self._board_task = asyncio.create_task(self._load_board())

    def show_game(self) -> None:
        try:
            self.session.start(self.profile, pygame.time.get_ticks())
        except ValidationError as e:
            self._show_toast(str(e))
            self.screen = Screen.START
            return

        self.profile = self.profile.cleaned()
        self._save_profile()
        self.effects.clear()
        self._save_status = None
        self._awaiting_save = None
        self._game_started_at = pygame.time.get_ticks()
        self.screen = Screen.GAME

    async def _load_board(self) -> None:
        try:
            rows = await self.leaderboard.load_ranked()
        except StoreUnavailable as e:
            logger.error(f"Leaderboard load failed: {e}")
            self._board_state = BoardState.ERROR
            return
        self._board_rows = rows
        self._board_state = BoardState.READY

    # Event bus handlers

    def _on_object_caught(self, event: Event) -> None:
        self.effects.burst(event.data["x"], event.data["y"])

    def _on_session_ended(self, event: Event) -> None:
        self._final_score = event.data["score"]
        self._awaiting_save = event.data["session"]
        self._save_status = ("Saving score...", self.config.muted_color)
        self.renderer.clear()
        self.effects.clear()
        self.screen = Screen.OVER

    def _on_save_result(self, event: Event) -> None:
        if event.data["session"] != self._awaiting_save:
            return  # Result of an older session
        if event.type == EventType.SCORE_SAVED:
            self._save_status = ("Score saved.", self.config.ok_color)
        else:
            self._save_status = ("Your score could not be confirmed as saved.", self.config.error_color)
        self._awaiting_save = None

    # Input

    def _pointer_x(self, window_x: float) -> float:
        """Window coordinate to play-field (device pixel) coordinate."""
        return window_x / self.config.width * self.field.width

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            self._handle_event(event)

    def _handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self._running = False
        elif event.type == pygame.KEYDOWN:
            self._handle_keydown(event)
        elif event.type == pygame.TEXTINPUT and self.screen == Screen.START:
            self.profile.name = (self.profile.name + event.text)[:24]
        elif self._is_release(event):
            # A press can end on any screen
            self.session.release()
        elif self.screen == Screen.GAME:
            self._handle_pointer(event)

    @staticmethod
    def _is_release(event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONUP:
            return event.button == 1
        return event.type == pygame.FINGERUP

    def _handle_pointer(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.session.press(self._pointer_x(event.pos[0]))
        elif event.type == pygame.MOUSEMOTION:
            self.session.drag(self._pointer_x(event.pos[0]))
        elif event.type == pygame.FINGERDOWN:
            self.session.press(event.x * self.field.width)
        elif event.type == pygame.FINGERMOTION:
            self.session.drag(event.x * self.field.width)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key == pygame.K_F1:
            self._show_log = not self._show_log
            return

        if self.screen == Screen.START:
            if key == pygame.K_ESCAPE:
                self._running = False
            elif key == pygame.K_BACKSPACE:
                self.profile.name = self.profile.name[:-1]
            elif key == pygame.K_LEFT:
                self._select_skin(-1)
            elif key == pygame.K_RIGHT:
                self._select_skin(1)
            elif key == pygame.K_RETURN:
                self.show_game()
            elif key == pygame.K_TAB:
                self.show_board()

        elif self.screen == Screen.BOARD:
            if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self.show_start()

        elif self.screen == Screen.GAME:
            if key == pygame.K_ESCAPE:
                self.show_start()

        elif self.screen == Screen.OVER:
            if key == pygame.K_RETURN:
                self.show_game()
            elif key == pygame.K_TAB:
                self.show_board()
            elif key == pygame.K_ESCAPE:
                self.show_start()

    # Rendering

    def _text(
        self,
        text: str,
        y: int,
        font: pygame.font.Font | None = None,
        color: tuple[int, int, int] | None = None,
        x: int | None = None,
    ) -> None:
        font = font or self._font
        surf = font.render(text, True, color or self.config.text_color)
        if x is None:
            x = (self.config.width - surf.get_width()) // 2
        self._surface.blit(surf, (x, y))

    def _render(self) -> None:
        """Render the current screen."""
        if not self._surface:
            return

        self._surface.fill(self.config.bg_color)

        if self.screen == Screen.GAME:
            self._render_game()
        elif self.screen == Screen.START:
            self._render_start()
        elif self.screen == Screen.BOARD:
            self._render_board()
        elif self.screen == Screen.OVER:
            self._render_over()

        now = pygame.time.get_ticks()
        if self._toast and now < self._toast_until:
            self._text(self._toast, self.config.height - 60, color=self.config.accent_color)

        if self._show_log:
            self._render_log_panel()

        pygame.display.flip()

    def _render_game(self) -> None:
        buffer = self.renderer.render(
            self.session.objects,
            self.session.catcher,
            self.session.state.skin,
            self.effects,
        )
        frame = pygame.surfarray.make_surface(buffer.swapaxes(0, 1))
        if frame.get_size() != (self.config.width, self.config.height):
            frame = pygame.transform.smoothscale(frame, (self.config.width, self.config.height))
        self._surface.blit(frame, (0, 0))

        self._text(str(self.session.score), 16, font=self._big_font, color=self.config.accent_color)

        shown_for = pygame.time.get_ticks() - self._game_started_at
        if shown_for < HINT_DURATION_MS:
            self._text("Hold and drag to move the bucket", self.config.height // 2,
                       font=self._small_font, color=self.config.muted_color)

    def _render_start(self) -> None:
        self._text("POPCORN CATCHER", 80, font=self._big_font, color=self.config.accent_color)

        self._text("Your name", 200, color=self.config.muted_color)
        cursor = "_" if (self._frame_count // 30) % 2 == 0 else " "
        self._text(self.profile.name + cursor, 230)

        self._text("Skin  (LEFT / RIGHT)", 300, color=self.config.muted_color)
        if self._skin_index >= 0:
            self._text(f"< {self.skins[self._skin_index].label} >", 330)
        elif self.skins:
            self._text("Pick a skin...", 330, color=self.config.muted_color)
        else:
            self._text("No skins found", 330, color=self.config.error_color)

        play_color = self.config.text_color if self.profile.is_valid else self.config.muted_color
        self._text("RETURN  play", 430, color=play_color)
        self._text("TAB  leaderboard", 465, color=self.config.muted_color)

    def _render_board(self) -> None:
        self._text("LEADERBOARD", 30, font=self._big_font, color=self.config.accent_color)

        if self._board_state == BoardState.LOADING:
            self._text("Loading...", 140, color=self.config.muted_color)
        elif self._board_state == BoardState.ERROR:
            self._text("Could not load the leaderboard", 140, color=self.config.error_color)
        elif not self._board_rows:
            self._text("No scores yet", 140, color=self.config.muted_color)
        else:
            y = 100
            row_height = self._small_font.get_linesize() + 2
            for rank, row in enumerate(self._board_rows, start=1):
                if y > self.config.height - 60:
                    break
                when = datetime.fromtimestamp(row.ts / 1000) if row.ts else datetime.now()
                self._text(f"{rank:>2}", y, font=self._small_font, x=20)
                self._text(row.display_name[:18], y, font=self._small_font, x=55)
                self._text(str(row.score), y, font=self._small_font, x=220)
                self._text(when.strftime("%d/%m/%Y %H:%M"), y, font=self._small_font,
                           color=self.config.muted_color, x=280)
                y += row_height

        self._text("ESC  back", self.config.height - 35, font=self._small_font,
                   color=self.config.muted_color)

    def _render_over(self) -> None:
        self._text("GAME OVER", 140, font=self._big_font, color=self.config.accent_color)
        self._text(f"Score: {self._final_score}", 230)
        if self._save_status:
            message, color = self._save_status
            self._text(message, 280, font=self._small_font, color=color)

        self._text("RETURN  play again", 400)
        self._text("TAB  leaderboard", 435, color=self.config.muted_color)
        self._text("ESC  home", 470, color=self.config.muted_color)

    def _render_log_panel(self) -> None:
        line_height = self._small_font.get_linesize()
        lines = self._log_buffer[-self._max_log_lines:]
        panel = pygame.Surface((self.config.width, line_height * len(lines) + 8), pygame.SRCALPHA)
        panel.fill((0, 0, 0, 190))
        self._surface.blit(panel, (0, 0))
        for index, line in enumerate(lines):
            surf = self._small_font.render(line[:70], True, self.config.muted_color)
            self._surface.blit(surf, (4, 4 + index * line_height))

    # Main loop

    async def run(self) -> None:
        """Main game loop: one simulation tick per display refresh."""
        self._init_pygame()
        self._running = True

        logger.info("Game window started")

        while self._running:
            self._handle_events()

            if self._clock:
                self.effects.update(self._clock.get_time())

            self.session.tick(pygame.time.get_ticks())

            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)

            self._frame_count += 1

            # Yield to background submissions
            await asyncio.sleep(0)

        await self.session.wait_for_submissions()
        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        logging.getLogger().removeHandler(self._log_handler)
        pygame.quit()
        logger.info("Game window stopped")
