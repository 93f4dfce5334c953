"""Tests for random player."""

import random

import pytest

from onitama_ai.engine.random_player import random_action
from onitama_ai.game.actions import Move
from onitama_ai.game.setup import GameSettings, new_state


def test_returns_legal_action() -> None:
    state = new_state(GameSettings(rng_seed=0))
    action = random_action(state)
    assert action in state.legal_actions()


def test_seeded_rng_is_deterministic() -> None:
    state = new_state(GameSettings(rng_seed=0))
    assert random_action(state, random.Random(5)) == random_action(state, random.Random(5))


def test_terminal_state_raises() -> None:
    state = new_state(GameSettings(rng_seed=0))
    rng = random.Random(0)
    for _ in range(1000):
        if state.is_terminal:
            break
        state = state.apply(random_action(state, rng))
    if not state.is_terminal:
        pytest.skip("random game did not finish")
    with pytest.raises(ValueError):
        random_action(state)


def test_game_with_all_variants() -> None:
    """Random play with the Wind Spirit and Ninjas never hits a rejected action."""
    settings = GameSettings(
        enable_ninja_variant=True,
        force_wind_spirit_inclusion=True,
        number_of_wind_cards=4,
        rng_seed=11,
    )
    state = new_state(settings)
    rng = random.Random(11)
    for _ in range(300):
        if state.is_terminal:
            break
        action = random_action(state, rng)
        if isinstance(action, Move) and state.board.piece_at(action.src).is_hidden_ninja:
            action = Move(action.card, action.src, action.dst, reveal_ninja=rng.random() < 0.5)
        state = state.apply(action)
    assert state.move_count > 0
