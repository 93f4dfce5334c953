"""The authoritative, mutable game aggregate.

対局の本体（セッション中に1つだけ存在する可変オブジェクト）。
中身はイミュータブルな OnitamaState への参照で、apply() が成功したときだけ
参照を新しい局面に差し替える。例外が出たときは参照が変わらないので、
不正なアクションで状態が壊れることはない。

apply() はロックで直列化する（同時に2つ呼ばれたら後の呼び出しは待つ）。
アドバイザーは snapshot() で得た局面（イミュータブル）に対して探索する。
"""

from __future__ import annotations

import logging
import threading

from onitama_ai.game.actions import Action
from onitama_ai.game.cards import Card
from onitama_ai.game.errors import ActionError
from onitama_ai.game.setup import GameSettings, new_state
from onitama_ai.game.state import OnitamaState, SquareView
from onitama_ai.game.types import Player, Point

logger = logging.getLogger(__name__)


class GameState:
    """Single-writer wrapper around the current OnitamaState and its history."""

    def __init__(self, state: OnitamaState, settings: GameSettings | None = None) -> None:
        self._state = state
        self._history: list[OnitamaState] = []
        self._lock = threading.Lock()
        self.settings = settings or GameSettings()

    def snapshot(self) -> OnitamaState:
        """Return the current (immutable) position."""
        return self._state

    def apply(self, action: Action) -> OnitamaState:
        """Apply an action; raises ActionError and leaves the game unchanged on rejection."""
        with self._lock:
            try:
                new = self._state.apply(action)
            except ActionError as exc:
                logger.debug("Rejected %s: %s", action, exc)
                raise
            self._history.append(self._state)
            self._state = new
            if new.winner is not None:
                logger.info("Game over: %s wins after %d actions", new.winner.label, new.move_count)
            return new

    def undo(self) -> bool:
        """Return to the position before the last action. False if nothing to undo."""
        with self._lock:
            if not self._history:
                return False
            self._state = self._history.pop()
            return True

    def reset(self, settings: GameSettings | None = None) -> None:
        """Start over with a fresh deal."""
        with self._lock:
            if settings is not None:
                self.settings = settings
            self._state = new_state(self.settings)
            self._history.clear()

    # --- 描画用の読み取りアクセサ ---

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def history(self) -> list[OnitamaState]:
        return list(self._history)

    @property
    def turn(self) -> Player:
        return self._state.turn

    @property
    def winner(self) -> Player | None:
        return self._state.winner

    @property
    def spare(self) -> Card:
        return self._state.spare

    def hand(self, player: Player) -> tuple[Card, Card]:
        return self._state.hand(player)

    @property
    def red_cards(self) -> tuple[Card, Card]:
        return self._state.hand(Player.RED)

    @property
    def blue_cards(self) -> tuple[Card, Card]:
        return self._state.hand(Player.BLUE)

    @property
    def wind_move_pending(self) -> bool:
        return self._state.wind_move_pending

    @property
    def wind_move_card(self) -> Card | None:
        return self._state.wind_move_card

    @property
    def ninja_move_pending(self) -> bool:
        return self._state.ninja_move_pending

    @property
    def ninja_move_card(self) -> Card | None:
        return self._state.ninja_move_card

    @property
    def can_move(self) -> bool:
        return self._state.can_move

    @property
    def last_move(self) -> Action | None:
        return self._state.last_move

    def grid(self, viewer: Player | None = None) -> list[list[SquareView | None]]:
        """grid[y][x]; hidden Ninjas appear as Pawns to everyone but viewer."""
        return self._state.visible_grid(viewer)

    def legal_destinations(self, card: Card | str, src: tuple[int, int]) -> set[Point]:
        return self._state.legal_destinations(card, src)


def new_game(config: GameSettings | None = None) -> GameState:
    """Create a new game from settings."""
    config = config or GameSettings()
    return GameState(new_state(config), config)


def apply(state: GameState, action: Action) -> OnitamaState:
    """Apply action to the game (see GameState.apply)."""
    return state.apply(action)


def legal_destinations(
    state: GameState | OnitamaState,
    card: Card | str,
    source: tuple[int, int],
) -> set[Point]:
    """Legal destination squares of the piece on source using card."""
    return state.legal_destinations(card, source)
