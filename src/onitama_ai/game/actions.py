"""Player actions and turn phases.

プレイヤーのアクション（Move / Discard）と、手番のフェーズ（タグ付き状態）。

手番は次の4つのフェーズのいずれか1つだけを取る:
  AwaitingAction      通常の手番開始
  PendingWind(card)   風のカードを使った後、風の精霊の追加移動待ち（必須）
  PendingNinja(card)  別の駒を動かした後、隠れた忍者の追加移動待ち（任意）
  Finished(winner)    終局
フラグを別々に持たないので「風と忍者が同時に保留」のような矛盾は起こらない。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from onitama_ai.game.cards import Card
from onitama_ai.game.types import Player, Point


@dataclass(frozen=True)
class Move:
    """Move the piece on src to dst using card (by name)."""

    card: str
    src: Point
    dst: Point
    reveal_ninja: bool = False

    def __post_init__(self) -> None:
        # (x, y) タプルで渡されても Point に揃える
        object.__setattr__(self, "src", Point(*self.src))
        object.__setattr__(self, "dst", Point(*self.dst))

    @property
    def key(self) -> str:
        """Ranking key "{card},{x},{y}" of the (card, source) pair."""
        return f"{self.card},{self.src.x},{self.src.y}"


@dataclass(frozen=True)
class Discard:
    """Give up a card without moving (only when no move exists)."""

    card: str


Action = Union[Move, Discard]


@dataclass(frozen=True)
class AwaitingAction:
    pass


@dataclass(frozen=True)
class PendingWind:
    card: Card


@dataclass(frozen=True)
class PendingNinja:
    card: Card


@dataclass(frozen=True)
class Finished:
    winner: Player


Phase = Union[AwaitingAction, PendingWind, PendingNinja, Finished]

AWAITING = AwaitingAction()
