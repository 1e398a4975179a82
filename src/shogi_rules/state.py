"""Game state for 本将棋 — the caller-side contract around the rules engine.

対局状態（盤面 + 手番 + 手数 + 局面履歴）。イミュータブルで、
play() は新しい状態を返す。手を受け取ったら必ず
検証 → 適用 → 状態判定 → 局面履歴への追加 の順に処理する。

外部の思考エンジンとのやり取り:
(a) to_sfen() で現局面を SFEN にして渡す
(b) 返ってきた USI 文字列を play_usi() に渡す。人間の手と同じ検証を通す。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property

from shogi_rules.board import Board, Move, apply_move
from shogi_rules.config import DEFAULT_RULES, RuleConfig
from shogi_rules.errors import IllegalMove, IllegalMoveReason
from shogi_rules.judge import can_declare_win, check_game_status
from shogi_rules.moves import is_in_check
from shogi_rules.sfen import (
    BestMove,
    board_to_sfen,
    move_to_usi,
    parse_bestmove,
    position_record,
    resolve_move,
    sfen_to_board,
    usi_to_move,
)
from shogi_rules.types import GameStatus, Player
from shogi_rules.validation import legal_moves, validate_move

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    """Immutable game state.

    history: 現局面より前の局面の正規形（sfen.position_record）。
             千日手判定は「現局面が履歴に何回あるか」で行う。
    """

    board: Board = field(default_factory=Board)
    side_to_move: Player = Player.SENTE
    move_number: int = 1
    history: tuple[str, ...] = ()
    config: RuleConfig = DEFAULT_RULES
    last_move: Move | None = None

    @classmethod
    def from_sfen(
        cls,
        sfen: str,
        history: tuple[str, ...] = (),
        config: RuleConfig = DEFAULT_RULES,
    ) -> GameState:
        board, side, move_number = sfen_to_board(sfen)
        return cls(
            board=board,
            side_to_move=side,
            move_number=move_number,
            history=tuple(history),
            config=config,
        )

    def to_sfen(self) -> str:
        return board_to_sfen(self.board, self.side_to_move, self.move_number)

    @property
    def record(self) -> str:
        """現局面の正規形（千日手判定用、手数を含まない）。"""
        return position_record(self.board, self.side_to_move)

    @cached_property
    def status(self) -> GameStatus:
        return check_game_status(
            self.board,
            self.side_to_move,
            self.history,
            self.record,
            self.config,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def winner(self) -> Player | None:
        """詰みなら直前に指した側の勝ち。それ以外は None。"""
        if self.status == GameStatus.CHECKMATE:
            return self.side_to_move.opponent
        return None

    @property
    def in_check(self) -> bool:
        return is_in_check(self.board, self.side_to_move)

    def can_declare_win(self) -> bool:
        """入玉宣言ルールが有効で、手番側が条件を満たしていれば True。"""
        if not self.config.allow_declared_win:
            return False
        return can_declare_win(self.board, self.side_to_move, self.config)

    def legal_moves(self) -> list[Move]:
        if self.is_terminal:
            return []
        return legal_moves(self.board, self.side_to_move)

    def legal_usi_moves(self) -> list[str]:
        return [move_to_usi(m) for m in self.legal_moves()]

    def play(self, move: Move) -> GameState:
        """Validate and apply ``move``, returning the next state.

        反則なら IllegalMove（理由付き）を送出する。元の状態は変化しない。
        """
        if self.is_terminal:
            raise IllegalMove(IllegalMoveReason.GAME_OVER, move)
        if not move.is_drop and move.piece_type is None:
            move = resolve_move(self.board, move)

        validate_move(self.board, move, self.side_to_move)
        # 取った駒を記録しておく
        move = resolve_move(self.board, move)

        next_state = GameState(
            board=apply_move(self.board, self.side_to_move, move),
            side_to_move=self.side_to_move.opponent,
            move_number=self.move_number + 1,
            history=self.history + (self.record,),
            config=self.config,
            last_move=move,
        )
        logger.debug("%s played %s", self.side_to_move.name, move_to_usi(move))
        if next_state.is_terminal:
            logger.info(
                "Game over after move %d: %s",
                self.move_number,
                next_state.status.value,
            )
        return next_state

    def play_usi(self, text: str) -> GameState:
        """USI 文字列の手を適用する（MalformedNotation / IllegalMove を送出しうる）。"""
        return self.play(resolve_move(self.board, usi_to_move(text)))

    def play_bestmove(self, line: str) -> tuple[GameState, BestMove]:
        """Apply an engine's ``bestmove`` line.

        投了・勝ち宣言（move が None）の場合は状態を変えずに返す。
        その扱いは対局管理側が決める。
        """
        best = parse_bestmove(line)
        if best.move is None:
            logger.info("Engine answered bestmove %s", best.special)
            return self, best
        return self.play(resolve_move(self.board, best.move)), best
