"""Tests for game settings, dealing and settings persistence."""

import json
import random
from pathlib import Path

import pytest

from onitama_ai.game.errors import ConfigError
from onitama_ai.game.setup import (
    GameSettings,
    _roll_wind_cards,
    deal,
    load_settings,
    new_state,
    save_settings,
    settings_from_dict,
    settings_to_dict,
)
from onitama_ai.game.types import HOME_SQUARES, CardSet, PieceKind, Player, Point


class _FixedRandom:
    """random() always returns the same value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class TestGameSettings:
    def test_defaults(self) -> None:
        settings = GameSettings()
        assert settings.disabled_card_sets == frozenset()
        assert settings.enable_wind_variant
        assert not settings.enable_ninja_variant
        assert settings.wind_enabled

    def test_card_set_ids_coerced(self) -> None:
        settings = GameSettings(disabled_card_sets=frozenset({"SenseisPath"}))
        assert settings.disabled_card_sets == frozenset({CardSet.SENSEIS_PATH})

    def test_unknown_card_set(self) -> None:
        with pytest.raises(ConfigError):
            GameSettings(disabled_card_sets=frozenset({"Chess"}))

    def test_wind_card_count_range(self) -> None:
        with pytest.raises(ConfigError):
            GameSettings(number_of_wind_cards=6)
        with pytest.raises(ConfigError):
            GameSettings(number_of_wind_cards=-1)

    def test_disabling_wind_set_disables_variant(self) -> None:
        settings = GameSettings(disabled_card_sets=frozenset({CardSet.WAY_OF_THE_WIND}))
        assert not settings.wind_enabled


class TestWindCardRoll:
    def test_roll_table(self) -> None:
        assert _roll_wind_cards(_FixedRandom(0.05)) == 0  # type: ignore[arg-type]
        assert _roll_wind_cards(_FixedRandom(0.20)) == 1  # type: ignore[arg-type]
        assert _roll_wind_cards(_FixedRandom(0.50)) == 2  # type: ignore[arg-type]
        assert _roll_wind_cards(_FixedRandom(0.70)) == 3  # type: ignore[arg-type]
        assert _roll_wind_cards(_FixedRandom(0.80)) == 4  # type: ignore[arg-type]
        assert _roll_wind_cards(_FixedRandom(0.95)) == 5  # type: ignore[arg-type]


class TestDeal:
    def test_five_distinct_cards(self) -> None:
        cards, _ = deal(GameSettings(), random.Random(0))
        assert len(cards) == 5
        assert len({card.name for card in cards}) == 5

    def test_seed_is_deterministic(self) -> None:
        assert new_state(GameSettings(rng_seed=3)) == new_state(GameSettings(rng_seed=3))

    def test_wind_cards_split_evenly(self) -> None:
        settings = GameSettings(force_wind_spirit_inclusion=True, number_of_wind_cards=2)
        for seed in range(10):
            cards, include_spirit = deal(settings, random.Random(seed))
            assert include_spirit
            red, blue, spare = cards[0:2], cards[2:4], cards[4]
            assert sum(c.is_wind_card for c in red) == 1
            assert sum(c.is_wind_card for c in blue) == 1
            assert not spare.is_wind_card

    def test_odd_wind_count_goes_to_spare(self) -> None:
        settings = GameSettings(force_wind_spirit_inclusion=True, number_of_wind_cards=5)
        cards, _ = deal(settings, random.Random(0))
        assert all(card.is_wind_card for card in cards)

    def test_no_wind_cards_without_spirit(self) -> None:
        settings = GameSettings(enable_wind_variant=False, force_wind_spirit_inclusion=True)
        for seed in range(10):
            cards, include_spirit = deal(settings, random.Random(seed))
            assert not include_spirit
            assert not any(card.is_wind_card for card in cards)

    def test_disabled_wind_set_means_no_spirit(self) -> None:
        settings = GameSettings(
            disabled_card_sets=frozenset({CardSet.WAY_OF_THE_WIND}),
            force_wind_spirit_inclusion=True,
        )
        _, include_spirit = deal(settings, random.Random(0))
        assert not include_spirit

    def test_disabled_sets_not_dealt(self) -> None:
        settings = GameSettings(disabled_card_sets=frozenset({CardSet.BASE}))
        for seed in range(10):
            cards, _ = deal(settings, random.Random(seed))
            assert all(card.card_set != CardSet.BASE for card in cards)

    def test_spirit_sometimes_included(self) -> None:
        seen = {deal(GameSettings(), random.Random(seed))[1] for seed in range(200)}
        assert seen == {True, False}

    def test_not_enough_cards(self) -> None:
        settings = GameSettings(
            disabled_card_sets=frozenset({CardSet.BASE, CardSet.SENSEIS_PATH}),
            enable_wind_variant=False,
        )
        with pytest.raises(ConfigError):
            deal(settings, random.Random(0))

    def test_wind_only_game(self) -> None:
        settings = GameSettings(
            disabled_card_sets=frozenset({CardSet.BASE, CardSet.SENSEIS_PATH}),
            force_wind_spirit_inclusion=True,
            number_of_wind_cards=5,
        )
        cards, include_spirit = deal(settings, random.Random(0))
        assert include_spirit
        assert all(card.is_wind_card for card in cards)


class TestNewState:
    def test_spirit_placed_in_centre(self) -> None:
        state = new_state(GameSettings(force_wind_spirit_inclusion=True, rng_seed=0))
        assert state.board.find_wind_spirit() == Point(2, 2)

    def test_ninja_variant(self) -> None:
        for seed in range(10):
            state = new_state(GameSettings(enable_ninja_variant=True, rng_seed=seed))
            for player in Player:
                ninjas = [
                    pos for pos, piece in state.board.pieces(player) if piece.kind == PieceKind.NINJA
                ]
                assert len(ninjas) == 1
                assert ninjas[0].y == HOME_SQUARES[player].y
                assert ninjas[0] != HOME_SQUARES[player]
                assert state.board.piece_at(ninjas[0]).is_hidden_ninja

    def test_no_ninja_by_default(self) -> None:
        state = new_state(GameSettings(rng_seed=0))
        assert state.board.find_hidden_ninja(Player.RED) is None
        assert state.board.find_hidden_ninja(Player.BLUE) is None


class TestPersistence:
    def test_camel_case_keys(self) -> None:
        data = settings_to_dict(GameSettings(disabled_card_sets=frozenset({CardSet.BASE})))
        assert data["disabledCardSets"] == ["Base"]
        assert data["enableWindVariant"] is True
        assert "rng_seed" not in data

    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        settings = GameSettings(
            disabled_card_sets=frozenset({CardSet.SENSEIS_PATH}),
            enable_ninja_variant=True,
            number_of_wind_cards=3,
        )
        save_settings(settings, path)
        assert json.loads(path.read_text())["numberOfWindCards"] == 3
        assert load_settings(path) == settings

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path / "missing.json") == GameSettings()

    def test_partial_dict(self) -> None:
        settings = settings_from_dict({"enableNinjaVariant": True})
        assert settings.enable_ninja_variant
        assert settings.enable_wind_variant

    def test_invalid_file_contents(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"disabledCardSets": ["Nope"]}))
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_malformed_file(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_wind_card_count_as_string_in_file(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"numberOfWindCards": "3"}))
        with pytest.raises(ConfigError):
            load_settings(path)


class TestSettingsTypes:
    @pytest.mark.parametrize(
        "data",
        [
            {"numberOfWindCards": "3"},
            {"numberOfWindCards": 2.5},
            {"numberOfWindCards": True},
            {"enableWindVariant": "yes"},
            {"enableNinjaVariant": 1},
            {"forceWindSpiritInclusion": None},
            {"disabledCardSets": "Base"},
            {"disabledCardSets": 5},
        ],
    )
    def test_wrong_types_raise_config_error(self, data: dict) -> None:
        with pytest.raises(ConfigError):
            settings_from_dict(data)

    def test_non_object_raises_config_error(self) -> None:
        with pytest.raises(ConfigError):
            settings_from_dict(["Base"])  # type: ignore[arg-type]

    def test_seed_must_be_integer(self) -> None:
        with pytest.raises(ConfigError):
            GameSettings(rng_seed="0")  # type: ignore[arg-type]

    def test_null_wind_card_count_is_random(self) -> None:
        assert settings_from_dict({"numberOfWindCards": None}).number_of_wind_cards is None
