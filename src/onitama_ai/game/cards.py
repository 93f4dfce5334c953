"""Card catalog for Onitama.

カード（移動パターン）の定義。
移動量 (dx, dy) はすべて青 (BLUE) の視点で定義する:
  dy > 0 が前進（相手陣地の方向）、dx > 0 が右。
赤 (RED) が使うときは Player.orient() で原点対称に反転する。

風のカード（Way of the Wind）は通常の駒の移動に加えて、
風の精霊 (Wind Spirit) の追加移動用の移動量 spirit_offsets を持つ。
"""

from __future__ import annotations

from dataclasses import dataclass

from onitama_ai.game.types import CardDirection, CardSet

Offset = tuple[int, int]


@dataclass(frozen=True)
class Card:
    """An immutable catalog entry.

    Attributes:
        name:           カード名（一意）
        card_set:       所属するカードセット
        offsets:        通常の駒の移動量（青視点）
        direction:      表示用の偏り（左寄り・右寄り・均等）
        king_offsets:   王だけが使う移動量。None なら offsets と同じ
        spirit_offsets: 風の精霊の追加移動用（風のカードのみ）
    """

    name: str
    card_set: CardSet
    offsets: tuple[Offset, ...]
    direction: CardDirection = CardDirection.BALANCED
    king_offsets: tuple[Offset, ...] | None = None
    spirit_offsets: tuple[Offset, ...] = ()

    @property
    def is_wind_card(self) -> bool:
        return self.card_set == CardSet.WAY_OF_THE_WIND

    def moves(self, is_king: bool = False, is_spirit: bool = False) -> tuple[Offset, ...]:
        """Return the offsets available to a piece (Blue frame).

        王は king_offsets があればそちらを使う。
        風の精霊の追加移動では spirit_offsets を使う。
        """
        if is_spirit:
            return self.spirit_offsets
        if is_king and self.king_offsets is not None:
            return self.king_offsets
        return self.offsets

    def __str__(self) -> str:
        return self.name


_L = CardDirection.LEFT
_R = CardDirection.RIGHT

BASE_CARDS: tuple[Card, ...] = (
    Card("Tiger", CardSet.BASE, ((0, 2), (0, -1))),
    Card("Dragon", CardSet.BASE, ((-2, 1), (2, 1), (-1, -1), (1, -1))),
    Card("Frog", CardSet.BASE, ((-2, 0), (-1, 1), (1, -1)), _L),
    Card("Rabbit", CardSet.BASE, ((2, 0), (1, 1), (-1, -1)), _R),
    Card("Crab", CardSet.BASE, ((0, 1), (-2, 0), (2, 0))),
    Card("Elephant", CardSet.BASE, ((-1, 1), (1, 1), (-1, 0), (1, 0))),
    Card("Goose", CardSet.BASE, ((-1, 1), (-1, 0), (1, 0), (1, -1)), _L),
    Card("Rooster", CardSet.BASE, ((1, 1), (1, 0), (-1, 0), (-1, -1)), _R),
    Card("Monkey", CardSet.BASE, ((-1, 1), (1, 1), (-1, -1), (1, -1))),
    Card("Mantis", CardSet.BASE, ((-1, 1), (1, 1), (0, -1))),
    Card("Horse", CardSet.BASE, ((0, 1), (-1, 0), (0, -1)), _L),
    Card("Ox", CardSet.BASE, ((0, 1), (1, 0), (0, -1)), _R),
    Card("Crane", CardSet.BASE, ((0, 1), (-1, -1), (1, -1))),
    Card("Boar", CardSet.BASE, ((0, 1), (-1, 0), (1, 0))),
    Card("Eel", CardSet.BASE, ((-1, 1), (-1, -1), (1, 0)), _L),
    Card("Cobra", CardSet.BASE, ((1, 1), (1, -1), (-1, 0)), _R),
)

SENSEIS_PATH_CARDS: tuple[Card, ...] = (
    Card("Fox", CardSet.SENSEIS_PATH, ((1, 1), (1, 0), (1, -1)), _R),
    Card("Dog", CardSet.SENSEIS_PATH, ((-1, 1), (-1, 0), (-1, -1)), _L),
    Card("Giraffe", CardSet.SENSEIS_PATH, ((-2, 1), (2, 1), (0, -1))),
    Card("Panda", CardSet.SENSEIS_PATH, ((0, 1), (1, 1), (-1, -1)), _R),
    Card("Bear", CardSet.SENSEIS_PATH, ((0, 1), (-1, 1), (1, -1)), _L),
    Card("Kirin", CardSet.SENSEIS_PATH, ((-1, 2), (1, 2), (0, -2))),
    Card("Sea Snake", CardSet.SENSEIS_PATH, ((0, 1), (2, 0), (-1, -1)), _R),
    Card("Viper", CardSet.SENSEIS_PATH, ((0, 1), (-2, 0), (1, -1)), _L),
    Card("Phoenix", CardSet.SENSEIS_PATH, ((-1, 1), (1, 1), (-2, 0), (2, 0))),
    Card("Mouse", CardSet.SENSEIS_PATH, ((0, 1), (1, 0), (-1, -1)), _R),
    Card("Rat", CardSet.SENSEIS_PATH, ((0, 1), (-1, 0), (1, -1)), _L),
    Card("Turtle", CardSet.SENSEIS_PATH, ((-2, 0), (2, 0), (-1, -1), (1, -1))),
    Card("Tanuki", CardSet.SENSEIS_PATH, ((0, 1), (2, 1), (-1, -1)), _R),
    Card("Iguana", CardSet.SENSEIS_PATH, ((-2, 1), (0, 1), (1, -1)), _L),
    Card("Sable", CardSet.SENSEIS_PATH, ((1, 1), (-2, 0), (-1, -1)), _L),
    Card("Otter", CardSet.SENSEIS_PATH, ((-1, 1), (2, 0), (1, -1)), _R),
)

# 風のカード: offsets は駒（弟子・師匠）の移動、spirit_offsets は風の精霊の追加移動
WAY_OF_THE_WIND_CARDS: tuple[Card, ...] = (
    Card(
        "Bat", CardSet.WAY_OF_THE_WIND, ((0, 1),),
        spirit_offsets=((-1, 1), (1, 1), (-1, -1), (1, -1)),
    ),
    Card(
        "Eagle", CardSet.WAY_OF_THE_WIND, ((0, 1),),
        king_offsets=((-1, 1), (0, 1), (1, 1)),
        spirit_offsets=((0, 2), (0, -2)),
    ),
    Card(
        "Heron", CardSet.WAY_OF_THE_WIND, ((-1, 0), (1, 0)),
        spirit_offsets=((0, 1), (0, -1)),
    ),
    Card(
        "Sparrow", CardSet.WAY_OF_THE_WIND, ((-1, 1),), _L,
        spirit_offsets=((1, 0), (2, 0), (-1, 0)),
    ),
    Card(
        "Swallow", CardSet.WAY_OF_THE_WIND, ((1, 1),), _R,
        spirit_offsets=((-1, 0), (-2, 0), (1, 0)),
    ),
    Card(
        "Hawk", CardSet.WAY_OF_THE_WIND, ((0, 1), (0, -1)),
        king_offsets=((0, 1), (0, -1), (-1, 0), (1, 0)),
        spirit_offsets=((-2, 0), (2, 0)),
    ),
    Card(
        "Owl", CardSet.WAY_OF_THE_WIND, ((-1, -1), (1, -1)),
        spirit_offsets=((0, 1), (-1, 0), (1, 0), (0, -1)),
    ),
    Card(
        "Crow", CardSet.WAY_OF_THE_WIND, ((-1, 0), (0, 1), (1, 0)),
        spirit_offsets=((-1, 1), (1, -1)),
    ),
)

CARD_SETS: dict[CardSet, tuple[Card, ...]] = {
    CardSet.BASE: BASE_CARDS,
    CardSet.SENSEIS_PATH: SENSEIS_PATH_CARDS,
    CardSet.WAY_OF_THE_WIND: WAY_OF_THE_WIND_CARDS,
}

# カード名 → Card の索引（アクションはカード名で指定される）
CARDS_BY_NAME: dict[str, Card] = {
    card.name: card for cards in CARD_SETS.values() for card in cards
}


def card_by_name(name: str) -> Card:
    """Look up a card by name; raises KeyError for unknown names."""
    return CARDS_BY_NAME[name]


def card_set_summary() -> list[dict]:
    """Describe every card set for display (moves, king moves, direction).

    カードセット一覧を表示用の辞書リストに変換する。
    Web API の /api/card-sets で使用する。
    """
    return [
        {
            "id": card_set.value,
            "name": card_set.display_name,
            "cards": [
                {
                    "card": card.name,
                    "moves": [list(o) for o in card.moves()],
                    "king_moves": [list(o) for o in card.moves(is_king=True)],
                    "spirit_moves": [list(o) for o in card.spirit_offsets],
                    "direction": card.direction.value,
                }
                for card in cards
            ],
        }
        for card_set, cards in CARD_SETS.items()
    ]
