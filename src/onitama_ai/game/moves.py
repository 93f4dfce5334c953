"""Legal move generation for Onitama.

合法手の生成。

通常の駒:
  移動元 + カードの移動量（手番プレイヤーの向きに変換）のうち、
  盤内で、空マス・相手の駒（取る）・風の精霊（取る）のマスが合法。
風の精霊:
  王以外の駒（敵味方問わず）のマスに移動でき、その駒と位置を入れ替える。
  王のマスには移動できない。主手番で風のカードは使えない。
隠れた忍者:
  合法性の判定では歩と全く同じに扱う（正体は判定に使わない）。
"""

from __future__ import annotations

from onitama_ai.game.actions import Finished, Move, PendingNinja, PendingWind, Phase
from onitama_ai.game.board import Board, Piece
from onitama_ai.game.cards import Card
from onitama_ai.game.types import PieceKind, Player, Point


def destinations(
    board: Board,
    player: Player,
    phase: Phase,
    card: Card,
    src: tuple[int, int],
) -> set[Point]:
    """Return the legal destinations of the piece on src using card.

    移動できない場合（空マス・相手の駒・保留中の制約違反など）は空集合を返す。
    エラーにはしない。
    """
    src = Point(*src)
    if isinstance(phase, Finished) or not src.in_bounds():
        return set()
    piece = board.piece_at(src)
    if piece is None:
        return set()
    is_spirit = piece.kind == PieceKind.WIND_SPIRIT
    if not is_spirit and piece.owner != player:
        return set()

    if isinstance(phase, PendingWind):
        # 風の追加移動: 風の精霊のみ、記録されたカードの精霊用移動量で
        if not is_spirit or card != phase.card:
            return set()
        offsets = card.moves(is_spirit=True)
    elif isinstance(phase, PendingNinja):
        # 忍者の追加移動: 自分の隠れた忍者のみ、記録されたカードで
        if not piece.is_hidden_ninja or card != phase.card:
            return set()
        offsets = card.moves()
    else:
        if is_spirit and card.is_wind_card:
            return set()  # 風の精霊は風のカードで主移動できない
        offsets = card.moves(is_king=piece.kind == PieceKind.KING)

    result: set[Point] = set()
    for offset in offsets:
        dst = src + player.orient(offset)
        if not dst.in_bounds():
            continue  # 盤外はスキップ
        if _can_land(piece, player, board.piece_at(dst)):
            result.add(dst)
    return result


def _can_land(mover: Piece, player: Player, target: Piece | None) -> bool:
    if target is None:
        return True
    if mover.kind == PieceKind.WIND_SPIRIT:
        return target.kind != PieceKind.KING  # 入れ替え（王とは不可）
    if target.kind == PieceKind.WIND_SPIRIT:
        return True  # 風の精霊を取る
    return target.owner != player


def movable_pieces(board: Board, player: Player) -> list[Point]:
    """Squares of the pieces the player may move (own pieces + the Wind Spirit)."""
    return [
        pos
        for pos, piece in board.pieces()
        if piece.owner == player or piece.kind == PieceKind.WIND_SPIRIT
    ]


def legal_moves(
    board: Board,
    player: Player,
    phase: Phase,
    hand: tuple[Card, ...],
) -> list[Move]:
    """Generate every legal Move for the player (no Discards).

    駒を取る手を先に並べる（αβ探索の枝刈り効率のため）。
    """
    if isinstance(phase, Finished):
        return []
    if isinstance(phase, PendingWind):
        spirit = board.find_wind_spirit()
        pairs = [(phase.card, spirit)] if spirit is not None else []
    elif isinstance(phase, PendingNinja):
        ninja = board.find_hidden_ninja(player)
        pairs = [(phase.card, ninja)] if ninja is not None else []
    else:
        sources = movable_pieces(board, player)
        pairs = [(card, src) for card in hand for src in sources]

    moves: list[Move] = []
    for card, src in pairs:
        for dst in sorted(destinations(board, player, phase, card, src)):
            moves.append(Move(card.name, src, dst))

    def capture_first(move: Move) -> int:
        mover = board.piece_at(move.src)
        target = board.piece_at(move.dst)
        is_capture = (
            target is not None
            and target.owner == player.opponent
            and mover is not None
            and mover.kind != PieceKind.WIND_SPIRIT  # 風の精霊は入れ替えのみ
        )
        return 0 if is_capture else 1

    moves.sort(key=capture_first)  # 安定ソートなので同順位の順序は保たれる
    return moves
