"""Background move advisor for training mode.

トレーニングモード用のアドバイザー。評価はバックグラウンドスレッドで行い、
新しい評価を要求すると実行中の評価はキャンセルされる（結果は捨てられる）。
呼び出し側は rankings() でいつでも最新の結果を取得でき、
現在の局面に対応しない結果には stale=True が付く。

探索は要求時点の局面（イミュータブルなスナップショット）に対して行うので、
本体の GameState とロックを共有する必要はない。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from onitama_ai.engine.minimax import MoveRanking, evaluate
from onitama_ai.game.state import OnitamaState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConfig:
    """Advisor search budget.

    Attributes:
        depth:      探索の最大深さ（アクション数）
        time_limit: 1回の評価の制限時間（秒）。None なら深さのみで打ち切る
    """

    depth: int = 4
    time_limit: float | None = 10.0


class Advisor:
    """Runs one cancellable evaluation at a time; newer requests supersede older ones."""

    def __init__(self, config: SearchConfig | None = None) -> None:
        self.config = config or SearchConfig()
        self._lock = threading.Lock()
        self._generation = 0
        self._requested: OnitamaState | None = None
        self._cancel: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._latest: MoveRanking | None = None
        self._done = threading.Event()

    def request(self, state: OnitamaState) -> int:
        """Start evaluating state in the background; returns the request id.

        同じ局面の評価が実行中・完了済みなら新しい探索は始めない。
        """
        with self._lock:
            if self._requested == state and self._cancel is not None:
                return self._generation
            if self._cancel is not None:
                self._cancel.set()  # 古い評価をキャンセル
            self._generation += 1
            generation = self._generation
            cancel = threading.Event()
            self._cancel = cancel
            self._requested = state
            self._done.clear()
            self._thread = threading.Thread(
                target=self._run,
                args=(generation, state, cancel),
                daemon=True,
            )
            self._thread.start()
            return generation

    def _run(self, generation: int, state: OnitamaState, cancel: threading.Event) -> None:
        ranking = evaluate(
            state,
            self.config.depth,
            time_limit=self.config.time_limit,
            cancel=cancel,
        )
        with self._lock:
            if generation != self._generation or cancel.is_set():
                logger.debug("Discarding superseded evaluation #%d", generation)
                return
            self._latest = ranking
            self._done.set()

    def rankings(self, state: OnitamaState | None = None) -> MoveRanking:
        """Return the latest finished ranking.

        state（省略時は最後に要求した局面）と一致しない結果は stale として返す。
        まだ結果がなければ空の stale ランキング。
        """
        with self._lock:
            latest = self._latest
            requested = self._requested
        if latest is None:
            return MoveRanking(stale=True)
        target = state if state is not None else requested
        if latest.stale or latest.position != target or requested != target:
            return latest.as_stale()
        return latest

    def wait(self, timeout: float | None = None) -> MoveRanking:
        """Block until the most recent request finishes (or timeout)."""
        self._done.wait(timeout)
        return self.rankings()

    def cancel(self) -> None:
        """Stop the in-flight evaluation, if any."""
        with self._lock:
            if self._cancel is not None:
                self._cancel.set()
            self._cancel = None
            self._requested = None
