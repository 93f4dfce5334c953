"""Types and constants for Onitama.

Onitama の基本型・定数定義。
盤面は 5列 × 5行（25マス）。座標は (x, y) で、青 (BLUE) の陣地が y=0、
赤 (RED) の陣地が y=4。
"""

from __future__ import annotations

from enum import Enum, IntEnum, unique
from typing import NamedTuple

# 盤面のサイズ: 5列 × 5行
COLS = 5
ROWS = 5
NUM_SQUARES = COLS * ROWS  # 25マス


class Point(NamedTuple):
    """A board coordinate (x = column, y = row)."""

    x: int
    y: int

    def __add__(self, other: object) -> Point:  # type: ignore[override]
        if not isinstance(other, tuple):
            return NotImplemented
        return Point(self.x + other[0], self.y + other[1])

    def in_bounds(self) -> bool:
        return 0 <= self.x < COLS and 0 <= self.y < ROWS

    @property
    def index(self) -> int:
        """squares タプル上のインデックス（行優先）。"""
        return self.y * COLS + self.x

    @classmethod
    def from_index(cls, idx: int) -> Point:
        return cls(idx % COLS, idx // COLS)


@unique
class Player(IntEnum):
    """Player identifiers.

    赤（RED）が先手で、y=4 の陣地から y=0 に向かって進む。
    青（BLUE）は y=0 の陣地から y=4 に向かって進む。
    カードの移動量は青の視点で定義し、赤は原点対称に反転して使う。
    """

    RED = 0
    BLUE = 1

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。"""
        return Player(1 - self.value)

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def orient(self, offset: tuple[int, int]) -> tuple[int, int]:
        """Turn a Blue-frame offset into this player's frame.

        青はそのまま、赤は (dx, dy) → (-dx, -dy) の点対称。
        """
        dx, dy = offset
        if self == Player.RED:
            return -dx, -dy
        return dx, dy


@unique
class PieceKind(IntEnum):
    """Piece kinds.

    NINJA は公開 (revealed) されるまで外部からは PAWN に見える。
    WIND_SPIRIT は中立の駒で、手番のプレイヤーならどちらでも動かせる。
    """

    PAWN = 0
    KING = 1
    NINJA = 2
    WIND_SPIRIT = 3


# 各プレイヤーの陣地（テンプル）。相手のテンプルに王が到達すると勝ち。
HOME_SQUARES: dict[Player, Point] = {
    Player.BLUE: Point(2, 0),
    Player.RED: Point(2, ROWS - 1),
}

# 風の精霊の初期位置（盤面中央）
WIND_SPIRIT_START = Point(2, 2)


def goal_square(player: Player) -> Point:
    """Return the square a player's King must reach to win."""
    return HOME_SQUARES[player.opponent]


@unique
class CardSet(str, Enum):
    """Card set identifiers (the persisted ids)."""

    BASE = "Base"
    SENSEIS_PATH = "SenseisPath"
    WAY_OF_THE_WIND = "WayOfTheWind"

    @property
    def display_name(self) -> str:
        return _CARD_SET_NAMES[self]


_CARD_SET_NAMES = {
    CardSet.BASE: "Base Game",
    CardSet.SENSEIS_PATH: "Sensei's Path",
    CardSet.WAY_OF_THE_WIND: "Way of the Wind",
}


@unique
class CardDirection(str, Enum):
    """Display-only bias of a card's movement pattern."""

    BALANCED = "Balanced"
    LEFT = "Left"
    RIGHT = "Right"
