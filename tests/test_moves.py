"""Tests for destination filtering, check detection and promotion rules."""

from __future__ import annotations

from shogi_rules.board import Board, Hands, Piece
from shogi_rules.moves import (
    checking_pieces,
    expand_promotions,
    is_in_check,
    legal_destinations,
    promotion_status,
    reachable_squares,
)
from shogi_rules.types import PieceType, Player, PromotionStatus, Square
from shogi_rules.validation import legal_moves


def _make_board(pieces: list[tuple[int, int, PieceType, Player]]) -> Board:
    board = Board.empty(Hands())
    for row, col, pt, owner in pieces:
        board = board.set_piece(row, col, Piece(pt, owner))
    return board


class TestReachableSquares:
    def test_empty_square(self) -> None:
        assert reachable_squares(Board.empty(), (4, 4)) == []

    def test_rook_on_empty_board(self) -> None:
        board = _make_board([(4, 4, PieceType.ROOK, Player.SENTE)])
        assert len(reachable_squares(board, (4, 4))) == 16

    def test_slide_stops_before_own_piece(self) -> None:
        board = _make_board([
            (4, 4, PieceType.ROOK, Player.SENTE),
            (2, 4, PieceType.PAWN, Player.SENTE),
        ])
        up = [sq for sq in reachable_squares(board, (4, 4)) if sq.col == 4 and sq.row < 4]
        assert up == [Square(3, 4)]

    def test_slide_captures_and_stops(self) -> None:
        board = _make_board([
            (4, 4, PieceType.LANCE, Player.SENTE),
            (2, 4, PieceType.PAWN, Player.GOTE),
        ])
        assert reachable_squares(board, (4, 4)) == [Square(3, 4), Square(2, 4)]

    def test_knight_jumps_over_pieces(self) -> None:
        pieces = [(4, 4, PieceType.KNIGHT, Player.SENTE)]
        pieces += [(3, c, PieceType.PAWN, Player.SENTE) for c in (3, 4, 5)]
        board = _make_board(pieces)
        assert set(reachable_squares(board, (4, 4))) == {(2, 3), (2, 5)}

    def test_step_cannot_land_on_own_piece(self) -> None:
        board = _make_board([
            (4, 4, PieceType.GOLD, Player.GOTE),
            (5, 4, PieceType.PAWN, Player.GOTE),
        ])
        assert (5, 4) not in reachable_squares(board, (4, 4))

    def test_horse_combines_slide_and_step(self) -> None:
        board = _make_board([(4, 4, PieceType.HORSE, Player.SENTE)])
        targets = set(reachable_squares(board, (4, 4)))
        assert (0, 0) in targets
        assert (3, 4) in targets
        assert (2, 4) not in targets

    def test_lance_at_far_edge_has_no_moves(self) -> None:
        board = _make_board([(0, 4, PieceType.LANCE, Player.SENTE)])
        assert reachable_squares(board, (0, 4)) == []


class TestCheck:
    def test_lance_gives_check(self) -> None:
        board = _make_board([
            (8, 4, PieceType.KING, Player.SENTE),
            (0, 4, PieceType.LANCE, Player.GOTE),
        ])
        assert is_in_check(board, Player.SENTE)
        assert checking_pieces(board, Player.SENTE) == [Square(0, 4)]

    def test_blocked_check(self) -> None:
        board = _make_board([
            (8, 4, PieceType.KING, Player.SENTE),
            (0, 4, PieceType.LANCE, Player.GOTE),
            (5, 4, PieceType.SILVER, Player.SENTE),
        ])
        assert not is_in_check(board, Player.SENTE)

    def test_no_king_is_never_in_check(self) -> None:
        board = _make_board([(0, 4, PieceType.ROOK, Player.GOTE)])
        assert not is_in_check(board, Player.SENTE)

    def test_initial_position_not_in_check(self) -> None:
        board = Board()
        assert not is_in_check(board, Player.SENTE)
        assert not is_in_check(board, Player.GOTE)


class TestLegalDestinations:
    def test_pinned_piece_moves_only_along_pin(self) -> None:
        board = _make_board([
            (8, 4, PieceType.KING, Player.SENTE),
            (7, 4, PieceType.GOLD, Player.SENTE),
            (0, 4, PieceType.ROOK, Player.GOTE),
        ])
        assert legal_destinations(board, (7, 4)) == [Square(6, 4)]

    def test_king_cannot_step_into_attack(self) -> None:
        board = _make_board([
            (8, 4, PieceType.KING, Player.SENTE),
            (0, 3, PieceType.ROOK, Player.GOTE),
        ])
        dests = set(legal_destinations(board, (8, 4)))
        assert (7, 3) not in dests
        assert (8, 3) not in dests
        assert (7, 4) in dests

    def test_must_resolve_check(self) -> None:
        board = _make_board([
            (8, 4, PieceType.KING, Player.SENTE),
            (8, 0, PieceType.GOLD, Player.SENTE),
            (0, 4, PieceType.ROOK, Player.GOTE),
        ])
        # 金は王手を防げないので動けない
        assert legal_destinations(board, (8, 0)) == []


class TestPromotionStatus:
    def test_entering_zone_is_optional(self) -> None:
        pawn = Piece(PieceType.PAWN, Player.SENTE)
        assert promotion_status(pawn, 3, 2) == PromotionStatus.OPTIONAL

    def test_outside_zone_is_forbidden(self) -> None:
        pawn = Piece(PieceType.PAWN, Player.SENTE)
        assert promotion_status(pawn, 5, 4) == PromotionStatus.FORBIDDEN

    def test_leaving_zone_is_optional(self) -> None:
        silver = Piece(PieceType.SILVER, Player.SENTE)
        assert promotion_status(silver, 2, 3) == PromotionStatus.OPTIONAL

    def test_pawn_and_lance_last_rank_required(self) -> None:
        for pt in (PieceType.PAWN, PieceType.LANCE):
            assert promotion_status(Piece(pt, Player.SENTE), 1, 0) == PromotionStatus.REQUIRED
            assert promotion_status(Piece(pt, Player.GOTE), 7, 8) == PromotionStatus.REQUIRED

    def test_knight_last_two_ranks_required(self) -> None:
        knight = Piece(PieceType.KNIGHT, Player.SENTE)
        assert promotion_status(knight, 3, 1) == PromotionStatus.REQUIRED
        assert promotion_status(knight, 4, 2) == PromotionStatus.OPTIONAL

    def test_gold_king_and_promoted_forbidden(self) -> None:
        for pt in (PieceType.GOLD, PieceType.KING, PieceType.DRAGON):
            assert promotion_status(Piece(pt, Player.SENTE), 3, 2) == PromotionStatus.FORBIDDEN


class TestExpandPromotions:
    def test_optional_gives_two_moves(self) -> None:
        board = _make_board([(3, 4, PieceType.PAWN, Player.SENTE)])
        moves = expand_promotions(board, Square(3, 4), Square(2, 4))
        assert sorted(m.promote for m in moves) == [False, True]

    def test_required_gives_promotion_only(self) -> None:
        board = _make_board([(1, 4, PieceType.PAWN, Player.SENTE)])
        moves = expand_promotions(board, Square(1, 4), Square(0, 4))
        assert len(moves) == 1
        assert moves[0].promote

    def test_capture_is_recorded(self) -> None:
        board = _make_board([
            (4, 4, PieceType.ROOK, Player.SENTE),
            (4, 0, PieceType.SILVER, Player.GOTE),
        ])
        (move,) = expand_promotions(board, Square(4, 4), Square(4, 0))
        assert move.captured == PieceType.SILVER


class TestInitialLegalMoves:
    def test_initial_move_count(self) -> None:
        """Initial position should have 30 legal moves for Sente."""
        assert len(legal_moves(Board(), Player.SENTE)) == 30

    def test_gote_also_has_thirty(self) -> None:
        assert len(legal_moves(Board(), Player.GOTE)) == 30

    def test_no_drops_without_hand(self) -> None:
        assert all(not m.is_drop for m in legal_moves(Board(), Player.SENTE))
