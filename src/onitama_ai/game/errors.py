"""Errors raised by the Onitama engine.

エンジンが送出する例外。すべて回復可能なユーザー向けエラーで、
例外が送出された場合、対局状態は一切変更されない。
"""

from __future__ import annotations


class ActionError(Exception):
    """Base class for a rejected action.

    kind は Web API などでクライアントに返すエラー種別。
    """

    kind = "ActionError"


class IllegalCard(ActionError):
    """The action names a card the acting player does not hold."""

    kind = "IllegalCard"


class IllegalDestination(ActionError):
    """The destination is not legal for the given card and source."""

    kind = "IllegalDestination"


class IllegalDiscard(ActionError):
    """A discard was submitted while a legal move exists."""

    kind = "IllegalDiscard"


class PendingActionRequired(ActionError):
    """A wind/ninja follow-up is outstanding and the action does not resolve it."""

    kind = "PendingActionRequired"


class GameOver(ActionError):
    """The game already has a winner."""

    kind = "GameOver"


class ConfigError(ValueError):
    """Game settings that cannot produce a valid setup."""
