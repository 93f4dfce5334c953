"""Tests for the mutable GameState aggregate."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from onitama_ai.game import apply, legal_destinations, new_game
from onitama_ai.game.actions import Move
from onitama_ai.game.board import Board, Piece
from onitama_ai.game.cards import card_by_name
from onitama_ai.game.errors import ActionError, IllegalDestination
from onitama_ai.game.game import GameState
from onitama_ai.game.setup import GameSettings
from onitama_ai.game.state import OnitamaState
from onitama_ai.game.types import PieceKind, Player, Point

# 風の精霊なし（1手で必ず手番が移る）
_SETTINGS = GameSettings(rng_seed=0, enable_wind_variant=False)


def _first_move(game: GameState) -> Move:
    move = game.snapshot().legal_moves()[0]
    assert isinstance(move, Move)
    return move


class TestNewGame:
    def test_initial(self) -> None:
        game = new_game(_SETTINGS)
        assert game.turn == Player.RED
        assert game.winner is None
        assert not game.can_undo
        assert game.can_move
        assert game.last_move is None
        assert len(game.red_cards) == 2
        assert len(game.blue_cards) == 2

    def test_default_settings(self) -> None:
        game = new_game()
        assert game.settings == GameSettings()


class TestApply:
    def test_apply_advances(self) -> None:
        game = new_game(_SETTINGS)
        move = _first_move(game)
        new = apply(game, move)
        assert game.snapshot() is new
        assert game.turn == Player.BLUE
        assert game.last_move == move
        assert game.can_undo

    def test_rejection_leaves_game_unchanged(self) -> None:
        game = new_game(_SETTINGS)
        before = game.snapshot()
        card = game.red_cards[0].name
        with pytest.raises(IllegalDestination):
            game.apply(Move(card, (2, 4), (2, 4)))
        assert game.snapshot() is before
        assert not game.can_undo

    def test_only_one_concurrent_apply_succeeds(self) -> None:
        game = new_game(_SETTINGS)
        move = _first_move(game)

        def submit() -> bool:
            try:
                game.apply(move)
            except ActionError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: submit(), range(8)))
        assert results.count(True) == 1
        assert len(game.history) == 1


class TestUndo:
    def test_undo_restores_previous(self) -> None:
        game = new_game(_SETTINGS)
        before = game.snapshot()
        game.apply(_first_move(game))
        assert game.undo()
        assert game.snapshot() is before
        assert not game.can_undo

    def test_undo_nothing(self) -> None:
        game = new_game(_SETTINGS)
        assert not game.undo()

    def test_reset(self) -> None:
        game = new_game(_SETTINGS)
        game.apply(_first_move(game))
        game.reset(GameSettings(rng_seed=1, enable_ninja_variant=True))
        assert game.turn == Player.RED
        assert not game.can_undo
        assert game.settings.enable_ninja_variant


class TestAccessors:
    def test_grid_hides_ninja(self) -> None:
        board = Board.from_pieces(
            {
                (2, 4): Piece(PieceKind.KING, Player.RED),
                (1, 4): Piece(PieceKind.NINJA, Player.RED, revealed=False),
                (2, 0): Piece(PieceKind.KING, Player.BLUE),
            }
        )
        cards = tuple(card_by_name(n) for n in ("Boar", "Tiger", "Frog", "Rabbit", "Crab"))
        game = GameState(OnitamaState(board=board, cards=cards))  # type: ignore[arg-type]
        assert game.grid(Player.BLUE)[4][1].kind == PieceKind.PAWN
        assert game.grid()[4][1].kind == PieceKind.PAWN
        assert game.grid(Player.RED)[4][1].kind == PieceKind.NINJA

    def test_legal_destinations(self) -> None:
        game = new_game(_SETTINGS)
        move = _first_move(game)
        assert move.dst in legal_destinations(game, move.card, move.src)
        assert legal_destinations(game, move.card, (2, 2)) == set()

    def test_hand_and_spare(self) -> None:
        game = new_game(_SETTINGS)
        assert game.hand(Player.RED) == game.red_cards
        assert game.spare not in game.red_cards + game.blue_cards
        assert not game.wind_move_pending
        assert game.wind_move_card is None
        assert not game.ninja_move_pending
        assert game.ninja_move_card is None

    def test_legal_destinations_on_point(self) -> None:
        game = new_game(_SETTINGS)
        for dst in game.legal_destinations(game.red_cards[0], (0, 4)):
            assert isinstance(dst, Point)
