"""Tests for the Onitama board representation."""

from onitama_ai.game.board import WIND_SPIRIT, Board, Piece
from onitama_ai.game.types import COLS, PieceKind, Player, Point


class TestInitialBoard:
    def test_piece_count(self) -> None:
        board = Board()
        assert len(board.pieces(Player.RED)) == 5
        assert len(board.pieces(Player.BLUE)) == 5

    def test_kings_at_home(self) -> None:
        board = Board()
        assert board.find_king(Player.RED) == Point(2, 4)
        assert board.find_king(Player.BLUE) == Point(2, 0)

    def test_pawns_fill_home_rows(self) -> None:
        board = Board()
        for x in (0, 1, 3, 4):
            assert board.piece_at((x, 4)) == Piece(PieceKind.PAWN, Player.RED)
            assert board.piece_at((x, 0)) == Piece(PieceKind.PAWN, Player.BLUE)

    def test_no_spirit_by_default(self) -> None:
        assert Board().find_wind_spirit() is None

    def test_spirit_in_centre(self) -> None:
        board = Board.initial(with_wind_spirit=True)
        assert board.find_wind_spirit() == Point(2, 2)
        assert board.piece_at((2, 2)).owner is None

    def test_ninja_columns(self) -> None:
        board = Board.initial(ninja_columns=(0, 4))
        red = board.piece_at((0, 4))
        blue = board.piece_at((4, 0))
        assert red == Piece(PieceKind.NINJA, Player.RED, revealed=False)
        assert blue == Piece(PieceKind.NINJA, Player.BLUE, revealed=False)
        assert board.find_hidden_ninja(Player.RED) == Point(0, 4)
        assert board.find_hidden_ninja(Player.BLUE) == Point(4, 0)


class TestPiece:
    def test_hidden_ninja_looks_like_pawn(self) -> None:
        ninja = Piece(PieceKind.NINJA, Player.RED, revealed=False)
        assert ninja.is_hidden_ninja
        assert ninja.visible_kind(None) == PieceKind.PAWN
        assert ninja.visible_kind(Player.BLUE) == PieceKind.PAWN
        assert ninja.visible_kind(Player.RED) == PieceKind.NINJA

    def test_revealed_ninja_visible_to_all(self) -> None:
        ninja = Piece(PieceKind.NINJA, Player.RED, revealed=False).reveal()
        assert not ninja.is_hidden_ninja
        assert ninja.visible_kind(Player.BLUE) == PieceKind.NINJA


class TestBoardOps:
    def test_set_piece_returns_new_board(self) -> None:
        board = Board()
        new = board.set_piece((0, 4), None)
        assert board.piece_at((0, 4)) is not None
        assert new.piece_at((0, 4)) is None

    def test_from_pieces(self) -> None:
        board = Board.from_pieces({(1, 2): WIND_SPIRIT})
        assert board.find_wind_spirit() == Point(1, 2)
        assert len(board.pieces()) == 1

    def test_captured_king_not_found(self) -> None:
        board = Board().set_piece((2, 0), None)
        assert board.find_king(Player.BLUE) is None

    def test_mirrored_swaps_sides(self) -> None:
        board = Board.from_pieces(
            {
                (0, 1): Piece(PieceKind.KING, Player.RED),
                (3, 4): Piece(PieceKind.NINJA, Player.BLUE, revealed=False),
                (1, 1): WIND_SPIRIT,
            }
        )
        mirrored = board.mirrored()
        assert mirrored.piece_at((COLS - 1, 3)) == Piece(PieceKind.KING, Player.BLUE)
        assert mirrored.piece_at((1, 0)) == Piece(PieceKind.NINJA, Player.RED, revealed=False)
        assert mirrored.piece_at((3, 3)) == WIND_SPIRIT

    def test_initial_board_is_symmetric(self) -> None:
        assert Board().mirrored() == Board()
