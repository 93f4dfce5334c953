"""Random player — selects a legal action uniformly at random.

ランダムプレイヤー: 合法なアクションの中からランダムに1つ選ぶ。

用途:
- ルール実装の動作確認（ランダム対局が最後まで進むか）
- 弱い対戦相手（CLI / Web の ai_type="random"）
"""

from __future__ import annotations

import random

from onitama_ai.game.actions import Action
from onitama_ai.game.state import OnitamaState


def random_action(state: OnitamaState, rng: random.Random | None = None) -> Action:
    """Return a random legal action.

    合法なアクションがない場合（終局局面）は ValueError を送出する。
    """
    actions = state.legal_actions()
    if not actions:
        raise ValueError("No legal actions available")
    return (rng or random).choice(actions)
