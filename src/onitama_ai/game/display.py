"""Terminal display for Onitama boards.

Onitama の盤面をターミナルに表示するためのモジュール。
未公開の忍者は持ち主以外には歩として表示する。
"""

from __future__ import annotations

from onitama_ai.game.cards import Card
from onitama_ai.game.state import OnitamaState, SquareView
from onitama_ai.game.types import COLS, ROWS, PieceKind, Player

# 駒の表示文字: 大文字=赤、小文字=青、風の精霊は "W"
PIECE_CHARS: dict[PieceKind, str] = {
    PieceKind.PAWN: "P",
    PieceKind.KING: "K",
    PieceKind.NINJA: "N",
    PieceKind.WIND_SPIRIT: "W",
}


def square_to_char(square: SquareView | None) -> str:
    """Convert a visible square to its display character."""
    if square is None:
        return "."
    char = PIECE_CHARS[square.kind]
    if square.owner == Player.BLUE:
        return char.lower()
    return char


def card_to_str(card: Card, player: Player) -> str:
    """Render a card's moves as a small 5x5 diagram from player's side.

    中央の "o" が駒の位置、"x" が移動先。
    """
    offsets = {player.orient(o) for o in card.moves()}
    lines = [card.name]
    # 画面上は y の大きい行（赤の陣地）を下に描く
    for dy in range(-2, 3):
        row = []
        for dx in range(-2, 3):
            if (dx, dy) == (0, 0):
                row.append("o")
            elif (dx, dy) in offsets:
                row.append("x")
            else:
                row.append(".")
        lines.append(" ".join(row))
    return "\n".join(lines)


def board_to_str(state: OnitamaState, viewer: Player | None = None) -> str:
    """Convert a state to a human-readable string.

    Example output:
        Blue: Ox, Crab
          a b c d e
        1 p p k p p
        2 . . . . .
        3 . . W . .
        4 . . . . .
        5 P P K P P
        Red: Tiger, Frog   spare: Eel   turn: Red

    - 大文字 = 赤の駒、小文字 = 青の駒、"." = 空マス
    - 列ラベル: a〜e（x = 0〜4）、行ラベル: 1〜5（y = 0〜4）
    """
    grid = state.visible_grid(viewer)
    lines: list[str] = []

    blue = ", ".join(card.name for card in state.hand(Player.BLUE))
    lines.append(f"Blue: {blue}")

    col_labels = " ".join(chr(ord("a") + c) for c in range(COLS))
    lines.append(f"  {col_labels}")
    for y in range(ROWS):
        row_chars = [square_to_char(grid[y][x]) for x in range(COLS)]
        lines.append(f"{y + 1} {' '.join(row_chars)}")

    red = ", ".join(card.name for card in state.hand(Player.RED))
    status = f"turn: {state.turn.label}"
    if state.winner is not None:
        status = f"winner: {state.winner.label}"
    elif state.wind_move_pending:
        status += f" (move the Wind Spirit with {state.wind_move_card})"
    elif state.ninja_move_pending:
        status += f" (Ninja may follow with {state.ninja_move_card})"
    lines.append(f"Red: {red}   spare: {state.spare.name}   {status}")

    return "\n".join(lines)
