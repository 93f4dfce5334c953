"""Game settings, initial deal and settings persistence.

対局設定と初期配置（カードの配布）。
カードセットの設定だけは対局をまたいで保存する（JSON ファイル）。
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path

from onitama_ai.game.board import Board
from onitama_ai.game.cards import CARD_SETS, Card
from onitama_ai.game.errors import ConfigError
from onitama_ai.game.state import OnitamaState
from onitama_ai.game.types import COLS, HOME_SQUARES, CardSet, Player

logger = logging.getLogger(__name__)

# 風の精霊が登場する確率（強制しない場合）
WIND_SPIRIT_CHANCE = 0.25

# 風のカードの枚数の累積確率: 0枚 10%, 1枚 15%, 2枚 35%, 3枚 15%, 4枚 15%, 5枚 10%
_WIND_CARD_ROLLS: tuple[tuple[float, int], ...] = (
    (0.10, 0),
    (0.25, 1),
    (0.60, 2),
    (0.75, 3),
    (0.90, 4),
    (1.00, 5),
)

# 風のカードの枚数ごとの配り方: (赤の手札, 青の手札, 予備) それぞれ風のカードの枚数
_WIND_LAYOUTS: dict[int, tuple[int, int, int]] = {
    0: (0, 0, 0),
    1: (0, 0, 1),
    2: (1, 1, 0),
    3: (1, 1, 1),
    4: (2, 2, 0),
    5: (2, 2, 1),
}


@dataclass(frozen=True)
class GameSettings:
    """Configuration for a new game.

    Attributes:
        disabled_card_sets:          使わないカードセット
        enable_wind_variant:         風の精霊・風のカードを使うか
        enable_ninja_variant:        隠れた忍者を使うか
        number_of_wind_cards:        風のカードの枚数（0〜5）。None ならランダム
        force_wind_spirit_inclusion: 風の精霊を必ず登場させるか
        rng_seed:                    乱数シード（None なら毎回ランダム）
    """

    disabled_card_sets: frozenset[CardSet] = field(default_factory=frozenset)
    enable_wind_variant: bool = True
    enable_ninja_variant: bool = False
    number_of_wind_cards: int | None = None
    force_wind_spirit_inclusion: bool = False
    rng_seed: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.disabled_card_sets, str):
            raise ConfigError("disabled_card_sets must be a collection of card set ids")
        try:
            sets = frozenset(CardSet(s) for s in self.disabled_card_sets)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Unknown card set: {exc}") from None
        object.__setattr__(self, "disabled_card_sets", sets)

        for name in ("enable_wind_variant", "enable_ninja_variant", "force_wind_spirit_inclusion"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a bool, got {getattr(self, name)!r}")
        for name in ("number_of_wind_cards", "rng_seed"):
            value = getattr(self, name)
            # bool は int のサブクラスなので除外する
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if self.number_of_wind_cards is not None and not 0 <= self.number_of_wind_cards <= 5:
            raise ConfigError(f"number_of_wind_cards must be 0-5, got {self.number_of_wind_cards}")

    @property
    def wind_enabled(self) -> bool:
        return self.enable_wind_variant and CardSet.WAY_OF_THE_WIND not in self.disabled_card_sets


def _roll_wind_cards(rng: random.Random) -> int:
    chance = rng.random()
    for threshold, count in _WIND_CARD_ROLLS:
        if chance < threshold:
            return count
    return 5


def deal(settings: GameSettings, rng: random.Random) -> tuple[tuple[Card, ...], bool]:
    """Draw the five cards and decide whether the Wind Spirit is in play.

    Returns ((red0, red1, blue0, blue1, spare), include_wind_spirit).
    """
    include_spirit = settings.wind_enabled and (
        settings.force_wind_spirit_inclusion or rng.random() < WIND_SPIRIT_CHANCE
    )

    wind_cards: list[Card] = []
    other_cards: list[Card] = []
    for card_set, cards in CARD_SETS.items():
        if card_set in settings.disabled_card_sets:
            continue
        if card_set == CardSet.WAY_OF_THE_WIND:
            wind_cards.extend(cards)
        else:
            other_cards.extend(cards)

    num_wind = 0
    if include_spirit:
        if settings.number_of_wind_cards is not None:
            num_wind = settings.number_of_wind_cards
        else:
            num_wind = _roll_wind_cards(rng)

    if num_wind > len(wind_cards) or 5 - num_wind > len(other_cards):
        raise ConfigError(
            f"Enabled card sets cannot supply {num_wind} wind and {5 - num_wind} other cards"
        )

    rng.shuffle(wind_cards)
    rng.shuffle(other_cards)

    red_wind, blue_wind, spare_wind = _WIND_LAYOUTS[num_wind]

    def draw(n_wind: int, n_total: int) -> list[Card]:
        drawn = [wind_cards.pop() for _ in range(n_wind)]
        drawn += [other_cards.pop() for _ in range(n_total - n_wind)]
        return drawn

    red = draw(red_wind, 2)
    blue = draw(blue_wind, 2)
    spare = draw(spare_wind, 1)
    return (*red, *blue, *spare), include_spirit


def new_state(settings: GameSettings | None = None) -> OnitamaState:
    """Create the initial OnitamaState for the given settings.

    赤が先手。忍者あり設定では、各プレイヤーの歩のうち1枚（ランダム）が隠れた忍者になる。
    """
    settings = settings or GameSettings()
    rng = random.Random(settings.rng_seed)
    cards, include_spirit = deal(settings, rng)

    ninja_columns: tuple[int | None, int | None] = (None, None)
    if settings.enable_ninja_variant:
        pawn_columns = [x for x in range(COLS) if x != HOME_SQUARES[Player.RED].x]
        ninja_columns = (rng.choice(pawn_columns), rng.choice(pawn_columns))

    logger.info(
        "New game: cards=%s wind_spirit=%s ninja=%s",
        [card.name for card in cards],
        include_spirit,
        settings.enable_ninja_variant,
    )
    return OnitamaState(
        board=Board.initial(with_wind_spirit=include_spirit, ninja_columns=ninja_columns),
        cards=cards,  # type: ignore[arg-type]
    )


# --- 設定の保存・読み込み ---


def settings_to_dict(settings: GameSettings) -> dict:
    return {
        "disabledCardSets": sorted(s.value for s in settings.disabled_card_sets),
        "enableWindVariant": settings.enable_wind_variant,
        "enableNinjaVariant": settings.enable_ninja_variant,
        "numberOfWindCards": settings.number_of_wind_cards,
        "forceWindSpiritInclusion": settings.force_wind_spirit_inclusion,
    }


def settings_from_dict(data: dict) -> GameSettings:
    """Build settings from the JSON form; raises ConfigError on malformed data."""
    if not isinstance(data, dict):
        raise ConfigError(f"Settings must be a JSON object, got {type(data).__name__}")
    return GameSettings(
        disabled_card_sets=data.get("disabledCardSets", ()),
        enable_wind_variant=data.get("enableWindVariant", True),
        enable_ninja_variant=data.get("enableNinjaVariant", False),
        number_of_wind_cards=data.get("numberOfWindCards"),
        force_wind_spirit_inclusion=data.get("forceWindSpiritInclusion", False),
    )


def load_settings(path: str | Path) -> GameSettings:
    """Load settings from JSON; a missing file yields the defaults."""
    path = Path(path)
    if not path.exists():
        return GameSettings()
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid settings file {path}: {exc}") from None
    return settings_from_dict(data)


def save_settings(settings: GameSettings, path: str | Path) -> None:
    """Save the card-set configuration (the seed is not persisted)."""
    Path(path).write_text(json.dumps(settings_to_dict(settings), indent=2))
