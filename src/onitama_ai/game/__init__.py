"""Onitama — 5x5 card-driven board game with Wind Spirit and Ninja variants."""

from onitama_ai.game.actions import Discard, Move
from onitama_ai.game.board import Board, Piece
from onitama_ai.game.cards import Card, card_by_name
from onitama_ai.game.display import board_to_str
from onitama_ai.game.errors import (
    ActionError,
    ConfigError,
    GameOver,
    IllegalCard,
    IllegalDestination,
    IllegalDiscard,
    PendingActionRequired,
)
from onitama_ai.game.game import GameState, apply, legal_destinations, new_game
from onitama_ai.game.setup import GameSettings, load_settings, save_settings
from onitama_ai.game.state import OnitamaState
from onitama_ai.game.types import COLS, ROWS, CardSet, PieceKind, Player, Point

__all__ = [
    "ActionError",
    "Board",
    "COLS",
    "Card",
    "CardSet",
    "ConfigError",
    "Discard",
    "GameOver",
    "GameSettings",
    "GameState",
    "IllegalCard",
    "IllegalDestination",
    "IllegalDiscard",
    "Move",
    "OnitamaState",
    "PendingActionRequired",
    "Piece",
    "PieceKind",
    "Player",
    "Point",
    "ROWS",
    "apply",
    "board_to_str",
    "card_by_name",
    "legal_destinations",
    "load_settings",
    "new_game",
    "save_settings",
]
