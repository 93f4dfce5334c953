"""FastAPI web application for playing Onitama.

FastAPI を使った Onitama の Web API。
ローカル対戦（2人）、AI 対戦、トレーニングモード（アドバイザー評価付き）を提供する。

エンドポイント:
  GET  /api/card-sets          — カードセットの一覧
  POST /api/new-game           — 新規対局を開始（ゲームIDを返す）
  GET  /api/state/{id}         — 現在の局面情報を取得
  GET  /api/legal/{id}         — カードと駒を指定して移動先を取得
  POST /api/action             — アクション（Move / Discard）を送る
  POST /api/undo/{id}          — 1手戻す（AI 対戦では自分の手番まで戻す）
  GET  /api/rankings/{id}      — アドバイザーの評価（トレーニングモード）
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from onitama_ai.engine.advisor import Advisor, SearchConfig
from onitama_ai.engine.minimax import MoveRanking, display_score, minimax_action
from onitama_ai.engine.random_player import random_action
from onitama_ai.game.actions import Action, Discard, Move
from onitama_ai.game.cards import card_set_summary
from onitama_ai.game.errors import ActionError, ConfigError
from onitama_ai.game.game import GameState, new_game
from onitama_ai.game.setup import GameSettings
from onitama_ai.game.state import OnitamaState
from onitama_ai.game.types import Player

logger = logging.getLogger(__name__)

app = FastAPI(title="Onitama AI")

# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
_games: dict[str, dict[str, Any]] = {}


class NewGameRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    disabled_card_sets: list[str] = []
    enable_wind_variant: bool = True
    enable_ninja_variant: bool = False
    number_of_wind_cards: int | None = None
    force_wind_spirit_inclusion: bool = False
    rng_seed: int | None = None
    ai_type: str = "none"  # "none"（ローカル対戦）, "minimax", "random"
    ai_depth: int = Field(3, ge=1)  # 探索の深さ（アクション数）
    player: str = "Red"  # 人間側の色（AI 対戦時）
    training: bool = False  # アドバイザー評価を有効にする


class Point2D(BaseModel):
    x: int
    y: int


class ActionRequest(BaseModel):
    """アクションリクエストのスキーマ。"""

    game_id: str
    type: str  # "Move" or "Discard"
    card: str
    src: Point2D | None = None
    dst: Point2D | None = None
    reveal_ninja: bool = False


def _parse_player(name: str | None) -> Player | None:
    if name is None:
        return None
    try:
        return Player[name.upper()]
    except KeyError:
        raise HTTPException(400, f"Unknown player: {name}") from None


def _get_game(game_id: str) -> dict[str, Any]:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(404, "Game not found")
    return game


def _get_ai_fn(ai_type: str, depth: int) -> Callable[[OnitamaState], Action] | None:
    """AI種別に応じたアクション選択関数を返す。"""
    if ai_type == "none":
        return None
    if ai_type == "random":
        return lambda state: random_action(state)
    if ai_type == "minimax":
        return lambda state: minimax_action(state, depth=depth)
    raise HTTPException(400, f"Unknown AI type: {ai_type}")


def _to_action(req: ActionRequest) -> Action:
    if req.type == "Discard":
        return Discard(req.card)
    if req.type == "Move":
        if req.src is None or req.dst is None:
            raise HTTPException(400, "Move requires src and dst")
        return Move(req.card, (req.src.x, req.src.y), (req.dst.x, req.dst.y), req.reveal_ninja)
    raise HTTPException(400, f"Unknown action type: {req.type}")


def _action_to_dict(action: Action | None) -> dict[str, Any] | None:
    if action is None:
        return None
    if isinstance(action, Discard):
        return {"type": "Discard", "card": action.card}
    return {
        "type": "Move",
        "card": action.card,
        "src": {"x": action.src.x, "y": action.src.y},
        "dst": {"x": action.dst.x, "y": action.dst.y},
        "reveal_ninja": action.reveal_ninja,
    }


def _state_to_dict(game: GameState, viewer: Player | None) -> dict[str, Any]:
    """Convert game state to JSON-serializable dict.

    局面情報を JSON 形式（辞書）に変換する。
    未公開の忍者は viewer（忍者の持ち主）以外には歩として返す。
    合法手の一覧は手番のプレイヤーが viewer のときだけ返す（忍者の位置が分かるため）。
    """
    state = game.snapshot()
    grid = [
        [
            None
            if square is None
            else {
                "kind": square.kind.name,
                "owner": square.owner.label if square.owner is not None else None,
                "revealed": square.revealed,
            }
            for square in row
        ]
        for row in state.visible_grid(viewer)
    ]
    captured = state.last_capture
    legal = [_action_to_dict(a) for a in state.legal_actions()] if viewer == state.turn else []
    return {
        "grid": grid,
        "redCards": [card.name for card in state.hand(Player.RED)],
        "blueCards": [card.name for card in state.hand(Player.BLUE)],
        "spare": state.spare.name,
        "turn": state.turn.label,
        "winner": state.winner.label if state.winner is not None else None,
        "canMove": state.can_move,
        "canUndo": game.can_undo,
        "windMovePending": state.wind_move_pending,
        "windMoveCard": state.wind_move_card.name if state.wind_move_card else None,
        "ninjaMovePending": state.ninja_move_pending,
        "ninjaMoveCard": state.ninja_move_card.name if state.ninja_move_card else None,
        "lastMove": _action_to_dict(state.last_move),
        "lastCapture": (
            {"kind": captured.kind.name, "owner": captured.owner.label if captured.owner else None}
            if captured is not None
            else None
        ),
        "legalActions": legal,
    }


def _ranking_to_dict(ranking: MoveRanking, viewer: Player | None) -> dict[str, Any]:
    return {
        "ranksByCardSrc": ranking.ranks_by_card_src,
        "ranksByMove": {
            key: {f"{dst.x},{dst.y}": score for dst, score in dsts.items()}
            for key, dsts in ranking.ranks_by_move.items()
        },
        "max": ranking.max,
        "min": ranking.min,
        "stale": ranking.stale,
        "depth": ranking.depth,
        "score": display_score(ranking, viewer),
    }


def _play_ai(game: dict[str, Any]) -> list[dict[str, Any] | None]:
    """AI の手番が続く限り AI に指させる（追加移動も含む）。"""
    ai_fn = game["ai_fn"]
    ai_player = game["ai_player"]
    state: GameState = game["state"]
    played = []
    while ai_fn is not None and state.winner is None and state.turn == ai_player:
        action = ai_fn(state.snapshot())
        state.apply(action)
        played.append(_action_to_dict(action))
    return played


@app.get("/api/card-sets")
async def card_sets() -> list[dict[str, Any]]:
    """カードセットの一覧（設定画面用）。"""
    return card_set_summary()


@app.post("/api/new-game")
async def create_game(req: NewGameRequest) -> dict[str, Any]:
    """新規対局を開始する。

    対局IDと初期局面情報を返す。人間が青なら AI（赤）が先に指す。
    """
    try:
        settings = GameSettings(
            disabled_card_sets=frozenset(req.disabled_card_sets),
            enable_wind_variant=req.enable_wind_variant,
            enable_ninja_variant=req.enable_ninja_variant,
            number_of_wind_cards=req.number_of_wind_cards,
            force_wind_spirit_inclusion=req.force_wind_spirit_inclusion,
            rng_seed=req.rng_seed,
        )
        state = new_game(settings)
    except ConfigError as exc:
        raise HTTPException(400, str(exc)) from None

    human = _parse_player(req.player)
    ai_fn = _get_ai_fn(req.ai_type, req.ai_depth)
    game_id = str(uuid.uuid4())[:8]
    _games[game_id] = {
        "state": state,
        "ai_fn": ai_fn,
        "ai_player": human.opponent if ai_fn is not None and human is not None else None,
        "human": human if ai_fn is not None else None,
        "advisor": Advisor(SearchConfig(depth=req.ai_depth)) if req.training else None,
    }
    ai_moves = _play_ai(_games[game_id])
    logger.info("Created game %s (ai=%s, training=%s)", game_id, req.ai_type, req.training)

    viewer = human if ai_fn is not None else state.turn
    return {"game_id": game_id, "state": _state_to_dict(state, viewer), "ai_moves": ai_moves}


@app.get("/api/state/{game_id}")
async def get_state(game_id: str, viewer: str | None = None) -> dict[str, Any]:
    """現在の局面情報を取得する（ページ再読み込み時などに使用）。

    AI 対戦では常に人間側の視点で返す。AI 側の視点は要求できない（403）。
    """
    game = _get_game(game_id)
    requested = _parse_player(viewer)
    human = game["human"]
    if human is not None:
        if requested is not None and requested != human:
            raise HTTPException(403, f"Cannot view the game as {requested.label}")
        requested = human
    return _state_to_dict(game["state"], requested)


@app.get("/api/legal/{game_id}")
async def get_legal(game_id: str, card: str, x: int, y: int) -> dict[str, Any]:
    """カードと移動元を指定して、移動できるマスの一覧を返す（ハイライト表示用）。"""
    game = _get_game(game_id)
    dsts = game["state"].legal_destinations(card, (x, y))
    return {"destinations": [{"x": p.x, "y": p.y} for p in sorted(dsts)]}


@app.post("/api/action")
async def post_action(req: ActionRequest) -> dict[str, Any]:
    """プレイヤーのアクションを受け取り、AI 対戦なら AI が応答して次の局面を返す。

    処理フロー:
    1. アクションを検証して適用（不正なら 400、局面は変化しない）
    2. AI の手番なら AI が指す（追加移動が続く場合はそれも）
    3. 最新の局面を返す
    """
    game = _get_game(req.game_id)
    state: GameState = game["state"]
    if game["ai_player"] is not None and state.turn == game["ai_player"]:
        raise HTTPException(400, "Not your turn")

    try:
        state.apply(_to_action(req))
    except ActionError as exc:
        raise HTTPException(400, {"error": exc.kind, "message": str(exc)}) from None

    ai_moves = _play_ai(game)
    # ローカル対戦では次に指すプレイヤーの視点で返す
    viewer = game["human"] if game["human"] is not None else state.turn
    return {"state": _state_to_dict(state, viewer), "ai_moves": ai_moves}


@app.post("/api/undo/{game_id}")
async def undo(game_id: str) -> dict[str, Any]:
    """1手戻す。AI 対戦では人間の手番の開始まで戻す。"""
    game = _get_game(game_id)
    state: GameState = game["state"]
    if not state.undo():
        raise HTTPException(400, "Nothing to undo")
    human = game["human"]
    if human is not None:
        while state.can_undo and (
            state.turn != human or state.wind_move_pending or state.ninja_move_pending
        ):
            state.undo()
    return {"state": _state_to_dict(state, human if human is not None else state.turn)}


@app.get("/api/rankings/{game_id}")
async def rankings(game_id: str, wait: float = 0.0) -> dict[str, Any]:
    """アドバイザーの評価を返す（トレーニングモードのみ）。

    現在の局面の評価が始まっていなければ開始する。wait 秒まで完了を待つ。
    評価中は直前の結果を stale=True で返す。
    """
    game = _get_game(game_id)
    advisor: Advisor | None = game["advisor"]
    if advisor is None:
        raise HTTPException(400, "Training mode is not enabled for this game")
    snapshot = game["state"].snapshot()
    advisor.request(snapshot)
    if wait > 0:
        # 待機はスレッドプールで行い、イベントループを止めない
        loop = asyncio.get_running_loop()
        ranking = await loop.run_in_executor(None, advisor.wait, wait)
    else:
        ranking = advisor.rankings(snapshot)
    viewer = game["human"] if game["human"] is not None else snapshot.turn
    return _ranking_to_dict(ranking, viewer)


def main() -> None:
    """Run the web server.

    `onitama-web` または `python -m onitama_ai.web.app` で起動する。
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
