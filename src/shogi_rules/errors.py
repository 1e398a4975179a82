"""Error taxonomy for the rules engine.

記譜の解析失敗・反則手・呼び出し側の誤用（不変条件違反）を区別する。
反則手は理由（IllegalMoveReason）付きで呼び出し側へ返す。
"""

from __future__ import annotations

from enum import Enum, unique


class ShogiError(Exception):
    """Base class for all errors raised by shogi_rules."""


class MalformedNotation(ShogiError, ValueError):
    """An SFEN position string or USI move string could not be parsed."""


@unique
class IllegalMoveReason(Enum):
    """Why a proposed move was rejected.

    人間向けの層（CLI・Web）が「なぜ指せないか」を説明できるよう、
    理由ごとに値を分けている。
    """

    OUT_OF_BOUNDS = "out_of_bounds"
    WRONG_OWNER = "wrong_owner"
    EMPTY_SOURCE = "empty_source"
    BLOCKED = "blocked"
    DOUBLE_PAWN = "double_pawn"                        # 二歩
    IMMOBILE_DROP = "immobile_drop"                    # 行き所のない駒
    PAWN_DROP_CHECKMATE = "pawn_drop_checkmate"        # 打ち歩詰め
    LEAVES_KING_IN_CHECK = "leaves_king_in_check"      # 王手放置
    DROP_ON_OCCUPIED_SQUARE = "drop_on_occupied_square"
    DROP_WITHOUT_HAND_PIECE = "drop_without_hand_piece"
    PIECE_MISMATCH = "piece_mismatch"
    INVALID_PROMOTION = "invalid_promotion"
    GAME_OVER = "game_over"


class IllegalMove(ShogiError, ValueError):
    """A move was rejected by the rule validator."""

    def __init__(self, reason: IllegalMoveReason, move: object = None) -> None:
        self.reason = reason
        self.move = move
        msg = f"Illegal move ({reason.value})"
        if move is not None:
            msg = f"{msg}: {move}"
        super().__init__(msg)


class InvariantViolation(ShogiError, RuntimeError):
    """The engine was called with a move that was never validated.

    例: 移動元に駒がない手を apply_move に渡した。
    正常な進行では起きないので、捕捉せずに呼び出しを中断させる。
    """
