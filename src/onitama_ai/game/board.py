"""Board representation for Onitama.

盤面のデータ構造。イミュータブル（frozen=True）設計で、
盤面を変更するメソッドはすべて新しい Board オブジェクトを返す。
探索（アドバイザー）が局面のコピーを安全に持てるのはこのため。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from onitama_ai.game.types import (
    COLS,
    HOME_SQUARES,
    NUM_SQUARES,
    ROWS,
    WIND_SPIRIT_START,
    PieceKind,
    Player,
    Point,
)


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    owner は風の精霊（中立）のみ None。
    revealed は NINJA でのみ意味を持つ（False の間は PAWN に見える）。
    """

    kind: PieceKind
    owner: Player | None
    revealed: bool = True

    @property
    def is_hidden_ninja(self) -> bool:
        return self.kind == PieceKind.NINJA and not self.revealed

    def visible_kind(self, viewer: Player | None = None) -> PieceKind:
        """Return the kind an observer is allowed to see.

        未公開の忍者は持ち主以外には PAWN として見せる。
        """
        if self.is_hidden_ninja and viewer != self.owner:
            return PieceKind.PAWN
        return self.kind

    def reveal(self) -> Piece:
        return replace(self, revealed=True)


WIND_SPIRIT = Piece(PieceKind.WIND_SPIRIT, None)


@dataclass(frozen=True)
class Board:
    """Immutable 5x5 board.

    squares: 25要素のタプル（行優先）。squares[y * COLS + x] がマス (x, y)。
    """

    squares: tuple[Piece | None, ...] = field(default_factory=lambda: Board._initial_squares())

    @staticmethod
    def _initial_squares(
        with_wind_spirit: bool = False,
        ninja_columns: tuple[int | None, int | None] = (None, None),
    ) -> tuple[Piece | None, ...]:
        """Return the standard starting position.

        Row 4 (Red home):  p p K p p
        Row 2:             風の精霊（有効時のみ）
        Row 0 (Blue home): p p K p p

        ninja_columns: (赤, 青) それぞれの忍者を置く列。None なら忍者なし。
        """
        squares: list[Piece | None] = [None] * NUM_SQUARES
        for player in Player:
            home = HOME_SQUARES[player]
            ninja_col = ninja_columns[player.value]
            for x in range(COLS):
                if x == home.x:
                    piece = Piece(PieceKind.KING, player)
                elif x == ninja_col:
                    piece = Piece(PieceKind.NINJA, player, revealed=False)
                else:
                    piece = Piece(PieceKind.PAWN, player)
                squares[Point(x, home.y).index] = piece
        if with_wind_spirit:
            squares[WIND_SPIRIT_START.index] = WIND_SPIRIT
        return tuple(squares)

    @classmethod
    def initial(
        cls,
        with_wind_spirit: bool = False,
        ninja_columns: tuple[int | None, int | None] = (None, None),
    ) -> Board:
        return cls(squares=cls._initial_squares(with_wind_spirit, ninja_columns))

    @classmethod
    def from_pieces(cls, pieces: dict[tuple[int, int], Piece]) -> Board:
        """Build a board from a {(x, y): Piece} mapping (tests, custom setups)."""
        squares: list[Piece | None] = [None] * NUM_SQUARES
        for (x, y), piece in pieces.items():
            squares[Point(x, y).index] = piece
        return cls(squares=tuple(squares))

    def piece_at(self, pos: tuple[int, int]) -> Piece | None:
        """Return the piece at (x, y), or None."""
        x, y = pos
        return self.squares[y * COLS + x]

    def set_piece(self, pos: tuple[int, int], piece: Piece | None) -> Board:
        """Return a new Board with the piece at (x, y) changed."""
        x, y = pos
        squares = list(self.squares)
        squares[y * COLS + x] = piece
        return Board(squares=tuple(squares))

    def pieces(self, owner: Player | None = None) -> list[tuple[Point, Piece]]:
        """List (position, piece) pairs, optionally filtered by owner."""
        return [
            (Point.from_index(idx), piece)
            for idx, piece in enumerate(self.squares)
            if piece is not None and (owner is None or piece.owner == owner)
        ]

    def find_king(self, player: Player) -> Point | None:
        """Return the position of player's King, or None if captured."""
        for idx, piece in enumerate(self.squares):
            if piece is not None and piece.kind == PieceKind.KING and piece.owner == player:
                return Point.from_index(idx)
        return None

    def find_wind_spirit(self) -> Point | None:
        for idx, piece in enumerate(self.squares):
            if piece is not None and piece.kind == PieceKind.WIND_SPIRIT:
                return Point.from_index(idx)
        return None

    def find_hidden_ninja(self, player: Player) -> Point | None:
        for idx, piece in enumerate(self.squares):
            if piece is not None and piece.is_hidden_ninja and piece.owner == player:
                return Point.from_index(idx)
        return None

    def mirrored(self) -> Board:
        """Return the board point-reflected through its centre, colours swapped.

        盤面を中心で点対称に反転し、駒の色を入れ替えた盤面を返す（対称性テスト用）。
        """
        squares: list[Piece | None] = [None] * NUM_SQUARES
        for idx, piece in enumerate(self.squares):
            if piece is None:
                continue
            p = Point.from_index(idx)
            owner = piece.owner.opponent if piece.owner is not None else None
            squares[Point(COLS - 1 - p.x, ROWS - 1 - p.y).index] = replace(piece, owner=owner)
        return Board(squares=tuple(squares))
