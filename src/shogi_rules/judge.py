"""Game status judgment for 本将棋.

局面の状態判定: 王手・詰み・合法手なし・千日手・入玉宣言。
"""

from __future__ import annotations

from collections.abc import Sequence

from shogi_rules.board import Board
from shogi_rules.config import DEFAULT_RULES, RuleConfig
from shogi_rules.moves import is_in_check, legal_destinations
from shogi_rules.types import (
    MAJOR_PIECE_TYPES,
    GameStatus,
    PieceType,
    Player,
    Square,
    promotion_zone,
)
from shogi_rules.validation import has_legal_move, is_checkmate

__all__ = [
    "can_declare_win",
    "check_game_status",
    "declare_win_points",
    "is_checkmate",
    "is_in_check",
    "is_repetition",
    "is_stalemate",
    "king_escape_squares",
]


def is_stalemate(board: Board, player: Player) -> bool:
    """王手されていないのに合法手がない（将棋では稀）。"""
    return not is_in_check(board, player) and not has_legal_move(board, player)


def is_repetition(
    history: Sequence[str],
    current: str,
    threshold: int = DEFAULT_RULES.repetition_threshold,
) -> bool:
    """千日手: 現局面が履歴に threshold 回以上現れていれば True。

    threshold=3 なら、今回が同一局面の4回目の出現。
    局面は手数を含まない正規形（sfen.position_record）で比較する。
    """
    return sum(1 for record in history if record == current) >= threshold


def check_game_status(
    board: Board,
    player: Player,
    history: Sequence[str] = (),
    current: str | None = None,
    config: RuleConfig = DEFAULT_RULES,
) -> GameStatus:
    """Judge the position for the side to move.

    優先順位: 千日手 → 詰み → 合法手なし → 王手 → 対局中
    """
    if current is not None and is_repetition(history, current, config.repetition_threshold):
        return GameStatus.REPETITION

    in_check = is_in_check(board, player)
    if not has_legal_move(board, player):
        return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
    if in_check:
        return GameStatus.CHECK
    return GameStatus.PLAYING


def declare_win_points(board: Board, player: Player) -> int:
    """敵陣（相手側3段）にある自分の駒の点数。大駒5点、その他1点、玉は0点。"""
    zone = promotion_zone(player)
    points = 0
    for square, piece in board.pieces(player):
        if square.row not in zone or piece.piece_type == PieceType.KING:
            continue
        points += 5 if piece.piece_type in MAJOR_PIECE_TYPES else 1
    return points


def can_declare_win(
    board: Board, player: Player, config: RuleConfig = DEFAULT_RULES
) -> bool:
    """入玉宣言勝ち: 玉が敵陣にいて、敵陣内の駒の点数が規定以上なら True。"""
    king = board.find_king(player)
    if king is None or king.row not in promotion_zone(player):
        return False
    return declare_win_points(board, player) >= config.declare_win_points


def king_escape_squares(board: Board, player: Player) -> list[Square]:
    """王が安全に移動できるマス（詰み判定の補助）。"""
    king = board.find_king(player)
    if king is None:
        return []
    return legal_destinations(board, king)
