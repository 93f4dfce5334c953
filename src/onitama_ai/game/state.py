"""Game position and action processing for Onitama.

Onitama の局面（ゲームツリーのノード）とアクションの適用。
OnitamaState はイミュータブルで、apply() は新しい局面を返す。
不正なアクションは ActionError を送出し、元の局面は一切変化しない。

カードは5枠の固定配列で持つ:
  cards[0], cards[1] = 赤の手札
  cards[2], cards[3] = 青の手札
  cards[4]           = 予備カード
カードを使う（または捨てる）と、その枠と予備の枠を入れ替える。

Terminal conditions（終局条件）:
1. 王取り: 相手の王を取った → 取ったプレイヤーの勝ち
2. テンプル到達: 自分の王を相手の陣地中央に移動 → そのプレイヤーの勝ち
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from onitama_ai.game.actions import (
    AWAITING,
    Action,
    AwaitingAction,
    Discard,
    Finished,
    Move,
    PendingNinja,
    PendingWind,
    Phase,
)
from onitama_ai.game.board import Board, Piece
from onitama_ai.game.cards import Card, card_by_name
from onitama_ai.game.errors import (
    GameOver,
    IllegalCard,
    IllegalDestination,
    IllegalDiscard,
    PendingActionRequired,
)
from onitama_ai.game.moves import destinations, legal_moves
from onitama_ai.game.types import COLS, ROWS, PieceKind, Player, Point, goal_square

SPARE_SLOT = 4
_HAND_SLOTS: dict[Player, tuple[int, int]] = {
    Player.RED: (0, 1),
    Player.BLUE: (2, 3),
}


@dataclass(frozen=True)
class SquareView:
    """What an observer may see on a square."""

    kind: PieceKind
    owner: Player | None
    revealed: bool = True


@dataclass(frozen=True)
class OnitamaState:
    """Immutable game state for Onitama.

    board:      盤面
    cards:      5枚のカード（赤2・青2・予備1）
    turn:       手番のプレイヤー（赤が先手）
    phase:      手番のフェーズ（通常・風の保留・忍者の保留・終局）
    last_move:  直前に適用されたアクション（表示用）
    last_capture: 直前の手で取られた駒。取られた忍者は公開済みとして記録する
    move_count: 適用したアクション数
    """

    board: Board
    cards: tuple[Card, Card, Card, Card, Card]
    turn: Player = Player.RED
    phase: Phase = field(default=AWAITING)
    last_move: Action | None = None
    last_capture: Piece | None = None
    move_count: int = 0

    # --- 読み取り用プロパティ ---

    @property
    def current_player(self) -> int:
        return self.turn.value

    @property
    def winner(self) -> Player | None:
        if isinstance(self.phase, Finished):
            return self.phase.winner
        return None

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.phase, Finished)

    @property
    def spare(self) -> Card:
        return self.cards[SPARE_SLOT]

    def hand(self, player: Player) -> tuple[Card, Card]:
        a, b = _HAND_SLOTS[player]
        return self.cards[a], self.cards[b]

    @property
    def wind_move_pending(self) -> bool:
        return isinstance(self.phase, PendingWind)

    @property
    def wind_move_card(self) -> Card | None:
        return self.phase.card if isinstance(self.phase, PendingWind) else None

    @property
    def ninja_move_pending(self) -> bool:
        return isinstance(self.phase, PendingNinja)

    @property
    def ninja_move_card(self) -> Card | None:
        return self.phase.card if isinstance(self.phase, PendingNinja) else None

    @property
    def can_move(self) -> bool:
        """True if the side to move has a legal action other than Discard."""
        return len(self.legal_moves()) > 0

    def visible_grid(self, viewer: Player | None = None) -> list[list[SquareView | None]]:
        """Return grid[y][x] with unrevealed Ninjas shown as Pawns.

        viewer が忍者の持ち主のときだけ正体を見せる。None なら誰にも見せない。
        """
        grid: list[list[SquareView | None]] = [[None] * COLS for _ in range(ROWS)]
        for pos, piece in self.board.pieces():
            kind = piece.visible_kind(viewer)
            revealed = piece.revealed if kind == PieceKind.NINJA else True
            grid[pos.y][pos.x] = SquareView(kind, piece.owner, revealed)
        return grid

    def view_for(self, viewer: Player) -> OnitamaState:
        """Return the position as viewer knows it.

        相手の未公開の忍者を歩に置き換えた局面。合法手は変わらない
        （隠れた忍者は合法性の判定で歩と同じ）ので、探索はこの局面で行う。
        """
        board = self.board
        for pos, piece in self.board.pieces(viewer.opponent):
            if piece.is_hidden_ninja:
                board = board.set_piece(pos, Piece(PieceKind.PAWN, piece.owner))
        if board is self.board:
            return self
        return replace(self, board=board)

    # --- 合法手 ---

    def legal_destinations(self, card: Card | str, src: tuple[int, int]) -> set[Point]:
        """Legal destinations of the piece on src with card (empty set if none)."""
        if isinstance(card, str):
            try:
                card = self._lookup(card)
            except IllegalCard:
                try:
                    card = card_by_name(card)
                except KeyError:
                    return set()
        return destinations(self.board, self.turn, self.phase, card, src)

    def legal_moves(self) -> list[Move]:
        return legal_moves(self.board, self.turn, self.phase, self.hand(self.turn))

    def legal_actions(self) -> list[Action]:
        """Every action apply() would accept, captures first.

        合法手がなければ手札の捨て札（Discard）のみ。
        忍者の保留中は「追加移動しない」（Discard）も選べる。
        """
        if self.is_terminal:
            return []
        moves: list[Action] = list(self.legal_moves())
        if isinstance(self.phase, (PendingNinja, PendingWind)):
            if isinstance(self.phase, PendingNinja) or not moves:
                moves.append(Discard(self.phase.card.name))
            return moves
        if moves:
            return moves
        return [Discard(card.name) for card in self.hand(self.turn)]

    # --- アクションの適用 ---

    def apply(self, action: Action) -> OnitamaState:
        """Apply an action and return the new state.

        不正なアクションは ActionError のサブクラスを送出する。
        自身（元の局面）は変更されない。
        """
        if isinstance(self.phase, Finished):
            raise GameOver(f"Game already finished, {self.phase.winner.label} won")
        if isinstance(action, Discard):
            return self._apply_discard(action)
        return self._apply_move(action)

    def _lookup(self, name: str) -> Card:
        # 対局中の5枚以外のカードは誰の手札にもない
        for card in self.cards:
            if card.name == name:
                return card
        raise IllegalCard(f"Card not in play: {name}")

    def _apply_discard(self, action: Discard) -> OnitamaState:
        card = self._lookup(action.card)
        phase = self.phase
        if isinstance(phase, (PendingWind, PendingNinja)):
            if card != phase.card:
                raise PendingActionRequired(f"Must resolve the follow-up move with {phase.card}")
            if isinstance(phase, PendingWind) and self.can_move:
                raise PendingActionRequired(f"Must move the Wind Spirit with {phase.card}")
            # 追加移動を行わずに手番を終える
            return self._end_turn(self.board, card, action)

        if card not in self.hand(self.turn):
            raise IllegalCard(f"Card not in hand: {card}")
        if self.can_move:
            raise IllegalDiscard("Valid moves exist")
        return self._end_turn(self.board, card, action)

    def _apply_move(self, move: Move) -> OnitamaState:
        card = self._lookup(move.card)
        phase = self.phase
        if isinstance(phase, PendingWind):
            if card != phase.card or move.src != self.board.find_wind_spirit():
                raise PendingActionRequired(f"You must move the Wind Spirit using {phase.card}")
        elif isinstance(phase, PendingNinja):
            if card != phase.card or move.src != self.board.find_hidden_ninja(self.turn):
                raise PendingActionRequired(
                    f"Move your Ninja with {phase.card} or discard {phase.card} to skip"
                )
        elif card not in self.hand(self.turn):
            raise IllegalCard(f"Card not in hand: {card}")

        if move.dst not in self.legal_destinations(card, move.src):
            raise IllegalDestination(f"Move not valid for card: {move.src} -> {move.dst}")

        piece = self.board.piece_at(move.src)
        target = self.board.piece_at(move.dst)
        assert piece is not None

        board = self.board.set_piece(move.src, None)
        captured: Piece | None = None
        if piece.kind == PieceKind.WIND_SPIRIT and target is not None:
            # 風の精霊は取らずに入れ替える
            board = board.set_piece(move.src, target)
            board = board.set_piece(move.dst, piece)
        else:
            captured = target
            moved = piece
            # 忍者は自分で公開するか、駒を取ったら公開される
            if piece.is_hidden_ninja and (move.reveal_ninja or target is not None):
                moved = piece.reveal()
            board = board.set_piece(move.dst, moved)
        if captured is not None and captured.is_hidden_ninja:
            captured = captured.reveal()

        # 終局判定（保留中の追加移動よりも優先する）
        king_captured = captured is not None and captured.kind == PieceKind.KING
        temple_reached = piece.kind == PieceKind.KING and move.dst == goal_square(self.turn)
        if king_captured or temple_reached:
            return self._end_turn(board, card, move, captured, winner=self.turn)

        if isinstance(phase, AwaitingAction):
            follow_up = self._follow_up(board, card, piece)
            if follow_up is not None:
                return OnitamaState(
                    board=board,
                    cards=self.cards,  # カードは追加移動が終わるまで回さない
                    turn=self.turn,
                    phase=follow_up,
                    last_move=move,
                    last_capture=captured,
                    move_count=self.move_count + 1,
                )
        return self._end_turn(board, card, move, captured)

    def _follow_up(self, board: Board, card: Card, moved: Piece) -> Phase | None:
        """Return the pending phase a first move opens, or None."""
        if card.is_wind_card and moved.kind != PieceKind.WIND_SPIRIT:
            spirit = board.find_wind_spirit()
            pending: Phase = PendingWind(card)
            if spirit is not None and destinations(board, self.turn, pending, card, spirit):
                return pending
        if moved.kind != PieceKind.NINJA:
            ninja = board.find_hidden_ninja(self.turn)
            pending = PendingNinja(card)
            if ninja is not None and destinations(board, self.turn, pending, card, ninja):
                return pending
        return None

    def _end_turn(
        self,
        board: Board,
        card: Card,
        action: Action,
        captured: Piece | None = None,
        winner: Player | None = None,
    ) -> OnitamaState:
        """Rotate card with the spare and pass the turn (or finish the game).

        終局時は手番を渡さず、保留中のフェーズも破棄して Finished にする。
        """
        cards = list(self.cards)
        slot = cards.index(card)
        cards[slot], cards[SPARE_SLOT] = cards[SPARE_SLOT], cards[slot]
        if winner is not None:
            turn, phase = self.turn, Finished(winner)
        else:
            turn, phase = self.turn.opponent, AWAITING
        return OnitamaState(
            board=board,
            cards=tuple(cards),  # type: ignore[arg-type]
            turn=turn,
            phase=phase,
            last_move=action,
            last_capture=captured,
            move_count=self.move_count + 1,
        )

    def mirrored(self) -> OnitamaState:
        """Point-reflect the board and swap the colours (and hands) of both sides."""
        red0, red1, blue0, blue1, spare = self.cards
        phase = self.phase
        if isinstance(phase, Finished):
            phase = Finished(phase.winner.opponent)
        return OnitamaState(
            board=self.board.mirrored(),
            cards=(blue0, blue1, red0, red1, spare),
            turn=self.turn.opponent,
            phase=phase,
            move_count=self.move_count,
        )
