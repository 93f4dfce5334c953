"""Minimax search with alpha-beta pruning and move rankings for Onitama.

ミニマックス探索（αβ枝刈り）と、トレーニングモード用の手の評価（ランキング）。

符号の規約: 評価値は常に「赤から見た値」。正なら赤が有利、負なら青が有利。
Onitama では風の精霊・忍者の追加移動で同じプレイヤーが続けて指すことがあるため、
手番が交互とは限らない。そこでネガマックスではなく、局面の手番を見て
最大化（赤）/最小化（青）を切り替えるミニマックスで探索する。
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field, replace

from onitama_ai.game.actions import Action, Move
from onitama_ai.game.state import OnitamaState
from onitama_ai.game.types import PieceKind, Player, Point, goal_square

logger = logging.getLogger(__name__)

# 勝敗が決まった局面の評価値。静的評価の絶対値はこれより十分小さい
WIN_SCORE = 1000.0

# 駒の価値テーブル（材料評価に使用）。王は勝敗で評価するので 0
_PIECE_VALUES = {
    PieceKind.PAWN: 10.0,
    PieceKind.NINJA: 12.0,  # 追加移動の権利がある分だけ歩より高い
    PieceKind.KING: 0.0,
    PieceKind.WIND_SPIRIT: 0.0,
}

# 王が相手のテンプルに1段近づくごとの加点
_KING_ADVANCE = 1.0


class SearchCancelled(Exception):
    """Raised inside the search when it is cancelled or out of time."""


@dataclass
class _SearchContext:
    cancel: threading.Event | None = None
    deadline: float | None = None
    nodes: int = 0

    def tick(self) -> None:
        self.nodes += 1
        if self.cancel is not None and self.cancel.is_set():
            raise SearchCancelled
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise SearchCancelled


@dataclass
class MoveRanking:
    """Scores of every (card, source) pair for the side to move.

    MoveRanking は GameState には保存しない派生値。

    Attributes:
        ranks_by_card_src: "{card},{x},{y}" → その組で始まる手の最善評価値（手番側にとって）
        ranks_by_move:     "{card},{x},{y}" → {移動先: 評価値}
        max / min:         全ての組の評価値の最大・最小（赤視点）
        stale:             現在の局面・最新の評価要求に対応しない結果なら True
        depth:             探索を完了した深さ
        turn:              評価した局面の手番
        nodes:             探索したノード数
        position:          評価した局面
    """

    ranks_by_card_src: dict[str, float] = field(default_factory=dict)
    ranks_by_move: dict[str, dict[Point, float]] = field(default_factory=dict)
    max: float | None = None
    min: float | None = None
    stale: bool = False
    depth: int = 0
    turn: Player | None = None
    nodes: int = 0
    position: OnitamaState | None = field(default=None, repr=False, compare=False)

    def as_stale(self) -> MoveRanking:
        return replace(self, stale=True)


def heuristic(state: OnitamaState) -> float:
    """Static evaluation of a position from Red's point of view.

    局面の静的評価（赤視点）。

    Scoring:
    - Terminal: ±WIN_SCORE
    - Material (pieces on board)
    - King advancement toward the opponent's temple
    """
    if state.winner is not None:
        return WIN_SCORE if state.winner == Player.RED else -WIN_SCORE

    score = 0.0
    for _, piece in state.board.pieces():
        if piece.owner is None:
            continue  # 風の精霊は中立
        value = _PIECE_VALUES[piece.kind]
        score += value if piece.owner == Player.RED else -value

    for player in Player:
        king = state.board.find_king(player)
        if king is None:
            continue
        progress = 4 - abs(king.y - goal_square(player).y)
        sign = 1.0 if player == Player.RED else -1.0
        score += sign * _KING_ADVANCE * progress

    return score


def _terminal_score(state: OnitamaState, depth: int) -> float:
    # depth を加算することで「より速い勝利」を優先する
    if state.winner == Player.RED:
        return WIN_SCORE + depth
    return -(WIN_SCORE + depth)


def minimax(
    state: OnitamaState,
    depth: int,
    alpha: float = float("-inf"),
    beta: float = float("inf"),
    ctx: _SearchContext | None = None,
) -> tuple[Action | None, float]:
    """Minimax search with alpha-beta pruning.

    ミニマックス法 + αβ枝刈りによる探索。
    alpha: 赤が保証できる最低スコア
    beta:  青が保証できる最高スコア（赤にとっての上限）

    Returns (best_action, score) with score from Red's point of view.
    best_action is None at depth 0 and at terminal states.
    """
    ctx = ctx or _SearchContext()
    ctx.tick()

    if state.is_terminal:
        return None, _terminal_score(state, depth)
    if depth == 0:
        return None, heuristic(state)

    actions = state.legal_actions()
    maximizing = state.turn == Player.RED
    best_action = actions[0]
    best_score = float("-inf") if maximizing else float("inf")

    for action in actions:
        _, score = minimax(state.apply(action), depth - 1, alpha, beta, ctx)
        if maximizing:
            if score > best_score:
                best_score, best_action = score, action
            alpha = max(alpha, score)
        else:
            if score < best_score:
                best_score, best_action = score, action
            beta = min(beta, score)
        if alpha >= beta:
            break  # カットオフ: 相手はこの枝を選ばない

    return best_action, best_score


def minimax_action(state: OnitamaState, depth: int = 3) -> Action:
    """Return the best action for the side to move.

    AI の対戦相手として使う。depth はアクション数（風・忍者の追加移動も1手と数える）。
    相手の未公開の忍者は歩として読む（手番側が知っている情報だけで探索する）。
    """
    if depth < 1:
        raise ValueError(f"depth must be at least 1, got {depth}")
    action, _ = minimax(state.view_for(state.turn), depth)
    if action is None:
        raise ValueError("No legal actions available")
    return action


def _rank(state: OnitamaState, depth: int, ctx: _SearchContext) -> MoveRanking:
    """Score every root action with a full window and group by (card, source)."""
    maximizing = state.turn == Player.RED
    better = max if maximizing else min

    by_key: dict[str, float] = {}
    by_move: dict[str, dict[Point, float]] = {}
    other_scores: list[float] = []
    for action in state.legal_actions():
        _, score = minimax(state.apply(action), depth - 1, ctx=ctx)
        if isinstance(action, Move):
            key = action.key
            by_key[key] = better(by_key.get(key, score), score)
            dsts = by_move.setdefault(key, {})
            dsts[action.dst] = better(dsts.get(action.dst, score), score)
        else:
            other_scores.append(score)

    scores = list(by_key.values()) or other_scores
    return MoveRanking(
        ranks_by_card_src=by_key,
        ranks_by_move=by_move,
        max=max(scores) if scores else None,
        min=min(scores) if scores else None,
        depth=depth,
        turn=state.turn,
        nodes=ctx.nodes,
        position=state,
    )


def evaluate(
    state: OnitamaState,
    depth_budget: int = 4,
    time_limit: float | None = None,
    cancel: threading.Event | None = None,
) -> MoveRanking:
    """Rank the moves of the side to move by iterative deepening.

    深さ 1 から depth_budget まで反復深化で探索し、最後に完了した深さの結果を返す。
    制限時間を超えるか cancel がセットされたら探索を打ち切る（途中の深さの結果は捨てる）。
    1つの深さも完了しなかった場合は空のランキング（stale=True）を返す。
    探索は手番側から見た局面（相手の未公開の忍者は歩）で行う。
    """
    ctx = _SearchContext(
        cancel=cancel,
        deadline=time.monotonic() + time_limit if time_limit is not None else None,
    )
    if state.is_terminal:
        return MoveRanking(turn=state.turn, position=state)

    view = state.view_for(state.turn)
    ranking = MoveRanking(stale=True, turn=state.turn, position=state)
    for depth in range(1, max(depth_budget, 1) + 1):
        try:
            ranking = replace(_rank(view, depth, ctx), position=state)
        except SearchCancelled:
            logger.debug("Search stopped at depth %d after %d nodes", depth, ctx.nodes)
            break
        scores = ranking.ranks_by_card_src.values()
        if scores and all(abs(score) >= WIN_SCORE for score in scores):
            break  # 全ての手の勝敗が確定したので、これ以上深く読む必要はない
    logger.debug("Search finished: depth=%d nodes=%d", ranking.depth, ctx.nodes)
    return ranking


def display_score(ranking: MoveRanking, viewer: Player | None = None) -> float:
    """Compress a ranking into a 0-100 score for viewer (default: side to move).

    生の評価値を対数で圧縮して 0〜100 に収める（50 が互角）。
    単調増加で、両端で飽和する。定数は厳密なものではない。
    """
    viewer = viewer if viewer is not None else ranking.turn
    if ranking.max is None or ranking.min is None or viewer is None:
        return 50.0
    raw = ranking.max if viewer == Player.RED else -ranking.min
    if abs(raw) < 1:
        weighted = 0.0
    else:
        weighted = math.copysign(min(50.0, 6 * math.log(abs(raw))), raw)
    return 50.0 + weighted
