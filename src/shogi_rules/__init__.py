"""本将棋 (Shogi) rules engine — legality, game status and SFEN/USI notation."""

from shogi_rules.board import Board, Hands, Move, Piece, apply_move
from shogi_rules.config import DEFAULT_RULES, RuleConfig
from shogi_rules.errors import (
    IllegalMove,
    IllegalMoveReason,
    InvariantViolation,
    MalformedNotation,
    ShogiError,
)
from shogi_rules.judge import check_game_status, is_checkmate, is_in_check
from shogi_rules.sfen import INITIAL_SFEN, board_to_sfen, move_to_usi, sfen_to_board, usi_to_move
from shogi_rules.state import GameState
from shogi_rules.types import COLS, ROWS, GameStatus, PieceType, Player, Square
from shogi_rules.validation import check_move, legal_moves

__all__ = [
    "Board",
    "COLS",
    "DEFAULT_RULES",
    "GameState",
    "GameStatus",
    "Hands",
    "INITIAL_SFEN",
    "IllegalMove",
    "IllegalMoveReason",
    "InvariantViolation",
    "MalformedNotation",
    "Move",
    "Piece",
    "PieceType",
    "Player",
    "ROWS",
    "RuleConfig",
    "ShogiError",
    "Square",
    "apply_move",
    "board_to_sfen",
    "check_game_status",
    "check_move",
    "is_checkmate",
    "is_in_check",
    "legal_moves",
    "move_to_usi",
    "sfen_to_board",
    "usi_to_move",
]
