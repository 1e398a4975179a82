"""Tests for the 本将棋 board, hands and apply_move."""

from __future__ import annotations

import pytest

from shogi_rules.board import Board, Hands, Move, Piece, apply_move
from shogi_rules.errors import InvariantViolation
from shogi_rules.types import COLS, PieceType, Player, Square


def _make_board(
    pieces: list[tuple[int, int, PieceType, Player]],
    sente_hand: tuple[PieceType, ...] = (),
    gote_hand: tuple[PieceType, ...] = (),
) -> Board:
    board = Board.empty(Hands((tuple(sorted(sente_hand)), tuple(sorted(gote_hand)))))
    for row, col, pt, owner in pieces:
        board = board.set_piece(row, col, Piece(pt, owner))
    return board


class TestInitialBoard:
    def test_forty_pieces(self) -> None:
        board = Board()
        assert len(list(board.pieces())) == 40
        assert len(list(board.pieces(Player.SENTE))) == 20
        assert len(list(board.pieces(Player.GOTE))) == 20

    def test_kings(self) -> None:
        board = Board()
        assert board.find_king(Player.SENTE) == (8, 4)
        assert board.find_king(Player.GOTE) == (0, 4)

    def test_back_rank_is_symmetric(self) -> None:
        board = Board()
        for c in range(COLS):
            top = board.piece_at(0, c)
            bottom = board.piece_at(8, c)
            assert top is not None and bottom is not None
            assert top.piece_type == bottom.piece_type

    def test_rook_and_bishop_squares(self) -> None:
        board = Board()
        assert board.piece_at(1, 1) == Piece(PieceType.BISHOP, Player.GOTE)
        assert board.piece_at(1, 7) == Piece(PieceType.ROOK, Player.GOTE)
        assert board.piece_at(7, 1) == Piece(PieceType.ROOK, Player.SENTE)
        assert board.piece_at(7, 7) == Piece(PieceType.BISHOP, Player.SENTE)

    def test_hands_start_empty(self) -> None:
        assert Board().hands.is_empty()

    def test_empty_board_has_no_king(self) -> None:
        assert Board.empty().find_king(Player.SENTE) is None


class TestHands:
    def test_add_demotes_promoted_piece(self) -> None:
        hands = Hands().add(Player.SENTE, PieceType.DRAGON)
        assert hands.of(Player.SENTE) == (PieceType.ROOK,)

    def test_add_keeps_sorted_multiset(self) -> None:
        hands = Hands()
        for pt in (PieceType.ROOK, PieceType.PAWN, PieceType.PAWN):
            hands = hands.add(Player.GOTE, pt)
        assert hands.of(Player.GOTE) == (PieceType.PAWN, PieceType.PAWN, PieceType.ROOK)
        assert hands.count(Player.GOTE, PieceType.PAWN) == 2
        assert hands.kinds(Player.GOTE) == [PieceType.PAWN, PieceType.ROOK]
        assert hands.of(Player.SENTE) == ()

    def test_remove(self) -> None:
        hands = Hands().add(Player.SENTE, PieceType.GOLD).remove(Player.SENTE, PieceType.GOLD)
        assert hands.is_empty()

    def test_remove_missing_raises(self) -> None:
        with pytest.raises(InvariantViolation):
            Hands().remove(Player.SENTE, PieceType.GOLD)

    def test_king_cannot_enter_hand(self) -> None:
        with pytest.raises(InvariantViolation):
            Hands().add(Player.SENTE, PieceType.KING)

    def test_add_returns_new_object(self) -> None:
        original = Hands()
        original.add(Player.SENTE, PieceType.PAWN)
        assert original.is_empty()

    def test_constructor_sorts_each_side(self) -> None:
        unsorted = Hands(((PieceType.GOLD, PieceType.PAWN), (PieceType.ROOK, PieceType.LANCE)))
        ordered = Hands(((PieceType.PAWN, PieceType.GOLD), (PieceType.LANCE, PieceType.ROOK)))
        assert unsorted == ordered
        assert unsorted.of(Player.SENTE) == (PieceType.PAWN, PieceType.GOLD)

    @pytest.mark.parametrize("pt", [PieceType.DRAGON, PieceType.PRO_PAWN, PieceType.KING])
    def test_constructor_rejects_non_hand_kinds(self, pt: PieceType) -> None:
        with pytest.raises(InvariantViolation):
            Hands(((pt,), ()))


class TestBoardQueries:
    def test_double_pawn_column_ignores_promoted_pawn(self) -> None:
        board = _make_board([(3, 2, PieceType.PRO_PAWN, Player.SENTE)])
        assert not board.has_unpromoted_pawn_in_column(Player.SENTE, 2)

    def test_double_pawn_column_ignores_opponent_pawn(self) -> None:
        board = _make_board([(3, 2, PieceType.PAWN, Player.GOTE)])
        assert not board.has_unpromoted_pawn_in_column(Player.SENTE, 2)
        assert board.has_unpromoted_pawn_in_column(Player.GOTE, 2)


class TestApplyMove:
    def test_does_not_mutate_input(self) -> None:
        board = Board()
        before = board.squares
        move = Move(to=(5, 2), piece_type=PieceType.PAWN, from_sq=(6, 2))
        new_board = apply_move(board, Player.SENTE, move)
        assert board.squares == before
        assert board.piece_at(6, 2) == Piece(PieceType.PAWN, Player.SENTE)
        assert new_board.piece_at(6, 2) is None
        assert new_board.piece_at(5, 2) == Piece(PieceType.PAWN, Player.SENTE)

    def test_capture_goes_to_hand_demoted(self) -> None:
        board = _make_board([
            (4, 4, PieceType.ROOK, Player.SENTE),
            (2, 4, PieceType.DRAGON, Player.GOTE),
        ])
        move = Move(to=(2, 4), piece_type=PieceType.ROOK, from_sq=(4, 4))
        new_board = apply_move(board, Player.SENTE, move)
        assert new_board.hands.of(Player.SENTE) == (PieceType.ROOK,)
        assert board.hands.is_empty()

    def test_promotion(self) -> None:
        board = _make_board([(3, 4, PieceType.SILVER, Player.SENTE)])
        move = Move(to=(2, 4), piece_type=PieceType.SILVER, from_sq=(3, 4), promote=True)
        new_board = apply_move(board, Player.SENTE, move)
        assert new_board.piece_at(2, 4) == Piece(PieceType.PRO_SILVER, Player.SENTE)

    def test_drop_removes_from_hand(self) -> None:
        board = _make_board([], sente_hand=(PieceType.GOLD, PieceType.GOLD))
        move = Move(to=(4, 4), piece_type=PieceType.GOLD)
        new_board = apply_move(board, Player.SENTE, move)
        assert new_board.piece_at(4, 4) == Piece(PieceType.GOLD, Player.SENTE)
        assert new_board.hands.count(Player.SENTE, PieceType.GOLD) == 1
        assert board.hands.count(Player.SENTE, PieceType.GOLD) == 2

    def test_move_onto_own_piece_raises(self) -> None:
        board = _make_board([
            (4, 4, PieceType.ROOK, Player.SENTE),
            (2, 4, PieceType.PAWN, Player.SENTE),
        ])
        move = Move(to=(2, 4), piece_type=PieceType.ROOK, from_sq=(4, 4))
        with pytest.raises(InvariantViolation):
            apply_move(board, Player.SENTE, move)
        assert board.hands.is_empty()

    def test_captured_king_does_not_enter_hand(self) -> None:
        board = _make_board([
            (4, 4, PieceType.GOLD, Player.SENTE),
            (3, 4, PieceType.KING, Player.GOTE),
        ])
        move = Move(to=(3, 4), piece_type=PieceType.GOLD, from_sq=(4, 4))
        assert apply_move(board, Player.SENTE, move).hands.is_empty()

    def test_empty_source_raises(self) -> None:
        move = Move(to=(4, 4), piece_type=PieceType.PAWN, from_sq=(5, 4))
        with pytest.raises(InvariantViolation):
            apply_move(Board.empty(), Player.SENTE, move)

    def test_drop_without_hand_piece_raises(self) -> None:
        with pytest.raises(InvariantViolation):
            apply_move(Board.empty(), Player.SENTE, Move(to=(4, 4), piece_type=PieceType.PAWN))

    def test_drop_on_occupied_square_raises(self) -> None:
        board = _make_board(
            [(4, 4, PieceType.PAWN, Player.GOTE)], sente_hand=(PieceType.GOLD,)
        )
        with pytest.raises(InvariantViolation):
            apply_move(board, Player.SENTE, Move(to=(4, 4), piece_type=PieceType.GOLD))

    def test_move_accepts_plain_tuples(self) -> None:
        move = Move(to=(1, 2), piece_type=PieceType.PAWN, from_sq=(2, 2))
        assert isinstance(move.to, Square)
        assert isinstance(move.from_sq, Square)
        assert not move.is_drop
