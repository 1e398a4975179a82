"""Special-rule validation and legal move aggregation.

1手ごとの合法性判定（反則の種類を返す）と、全合法手の列挙。

特殊ルール:
- 二歩:           同じ筋に自分の未成歩がある列に歩を打てない
- 行き所のない駒: 歩・香は最奥段、桂は奥2段に打てない
- 打ち歩詰め:     歩を打って詰ませてはならない（他の駒で既に詰んでいる場合を除く）
- 王手放置:       指した後に自玉が取られる手は指せない

全合法手の列挙（iter_legal_moves）は打ち手も check_move に通すため、
詰み判定で反則の打ち手を「逃れ」と誤認することはない。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from shogi_rules.board import Board, Move, Piece, apply_move
from shogi_rules.errors import IllegalMove, IllegalMoveReason
from shogi_rules.moves import (
    expand_promotions,
    is_in_check,
    legal_destinations,
    promotion_status,
    reachable_squares,
)
from shogi_rules.types import (
    COLS,
    HAND_PIECE_TYPES,
    NUM_SQUARES,
    PieceType,
    Player,
    PromotionStatus,
    Square,
    in_bounds,
    rows_from_far_end,
)

logger = logging.getLogger(__name__)


def is_double_pawn(board: Board, move: Move, player: Player) -> bool:
    """二歩: 歩を打つ筋に自分の未成歩が既にあれば True。

    相手の歩や自分の「と金」は数えない。盤上の歩を動かす手は対象外。
    """
    if not move.is_drop or move.piece_type != PieceType.PAWN:
        return False
    return board.has_unpromoted_pawn_in_column(player, move.to.col)


def is_immobile_drop(
    piece_type: PieceType, square: Square | tuple[int, int], player: Player
) -> bool:
    """行き所のない駒: 打った後に二度と動けないマスなら True。"""
    depth = rows_from_far_end(player, square[0])
    if piece_type in (PieceType.PAWN, PieceType.LANCE):
        return depth == 0
    if piece_type == PieceType.KNIGHT:
        return depth <= 1
    return False


def is_pawn_drop_checkmate(board: Board, move: Move, player: Player) -> bool:
    """Uchifuzume: True if this pawn drop is the sole cause of checkmate.

    1. 歩を打った盤面で相手が詰んでいなければ問題なし
    2. 詰んでいる場合、同じ盤面から打った歩だけを取り除いて再判定する
       - それでも詰んでいる → 他の駒で既に詰んでいる。歩が原因ではないので許可
       - 詰みが消える → 歩打ちが詰みの原因なので反則
    詰み判定は王手放置フィルタ済みの合法手で行うため、
    ピンされた駒による歩の取り返しは逃れとして数えない。
    """
    if not move.is_drop or move.piece_type != PieceType.PAWN:
        return False

    opponent = player.opponent
    dropped = _place_drop(board, move, player)
    if not is_checkmate(dropped, opponent):
        return False

    without_pawn = dropped.set_piece(move.to.row, move.to.col, None)
    return not is_checkmate(without_pawn, opponent)


def _place_drop(board: Board, move: Move, player: Player) -> Board:
    """判定用に駒を打った盤面を作る。持ち駒にあればそこから減らす。"""
    assert move.piece_type is not None
    if board.hands.count(player, move.piece_type) > 0:
        return apply_move(board, player, move)
    return board.set_piece(move.to.row, move.to.col, Piece(move.piece_type, player))


def check_move(board: Board, move: Move, player: Player) -> IllegalMoveReason | None:
    """Return why ``move`` is illegal for ``player``, or None if it is legal.

    実際に盤面へ適用する前の唯一の合法性ゲート。
    人間の手もエンジンから受け取った手も同じ判定を通す。
    """
    if not in_bounds(*move.to):
        return IllegalMoveReason.OUT_OF_BOUNDS
    if move.is_drop:
        return _check_drop(board, move, player)
    return _check_board_move(board, move, player)


def _check_drop(board: Board, move: Move, player: Player) -> IllegalMoveReason | None:
    pt = move.piece_type
    if board.piece_at(*move.to) is not None:
        return IllegalMoveReason.DROP_ON_OCCUPIED_SQUARE
    if pt not in HAND_PIECE_TYPES or board.hands.count(player, pt) == 0:
        return IllegalMoveReason.DROP_WITHOUT_HAND_PIECE
    if move.promote:
        return IllegalMoveReason.INVALID_PROMOTION
    if is_double_pawn(board, move, player):
        return IllegalMoveReason.DOUBLE_PAWN
    if is_immobile_drop(pt, move.to, player):
        return IllegalMoveReason.IMMOBILE_DROP
    if is_pawn_drop_checkmate(board, move, player):
        return IllegalMoveReason.PAWN_DROP_CHECKMATE
    # 打ち手は駒ごとの合法手フィルタを通らないので、ここで王手放置を確認する
    if is_in_check(apply_move(board, player, move), player):
        return IllegalMoveReason.LEAVES_KING_IN_CHECK
    return None


def _check_board_move(board: Board, move: Move, player: Player) -> IllegalMoveReason | None:
    from_sq = move.from_sq
    assert from_sq is not None
    if not in_bounds(*from_sq):
        return IllegalMoveReason.OUT_OF_BOUNDS

    piece = board.piece_at(*from_sq)
    if piece is None:
        return IllegalMoveReason.EMPTY_SOURCE
    if piece.owner != player:
        return IllegalMoveReason.WRONG_OWNER
    if move.piece_type is not None and move.piece_type != piece.piece_type:
        return IllegalMoveReason.PIECE_MISMATCH

    if move.to not in reachable_squares(board, from_sq):
        return IllegalMoveReason.BLOCKED
    if move.to not in legal_destinations(board, from_sq):
        return IllegalMoveReason.LEAVES_KING_IN_CHECK

    status = promotion_status(piece, from_sq.row, move.to.row)
    if move.promote and status == PromotionStatus.FORBIDDEN:
        return IllegalMoveReason.INVALID_PROMOTION
    if not move.promote and status == PromotionStatus.REQUIRED:
        return IllegalMoveReason.INVALID_PROMOTION
    return None


def is_valid_move(board: Board, move: Move, player: Player) -> bool:
    """True if ``move`` passes every rule for ``player``."""
    return check_move(board, move, player) is None


def validate_move(board: Board, move: Move, player: Player) -> None:
    """Raise IllegalMove with the rejection reason if ``move`` is illegal."""
    reason = check_move(board, move, player)
    if reason is not None:
        logger.debug("Rejected %s for %s: %s", move, player.name, reason.value)
        raise IllegalMove(reason, move)


def iter_legal_moves(board: Board, player: Player) -> Iterator[Move]:
    """Yield every legal move for ``player``.

    盤上の手: 各駒の合法な移動先を成り・不成で展開する。
    打ち手:   持ち駒の種類 × 空きマスの候補を check_move で検証して残す。
    """
    for square, _ in board.pieces(player):
        for to in legal_destinations(board, square):
            yield from expand_promotions(board, square, to)

    for pt in board.hands.kinds(player):
        for idx in range(NUM_SQUARES):
            if board.squares[idx] is not None:
                continue
            move = Move(to=Square(idx // COLS, idx % COLS), piece_type=pt)
            if check_move(board, move, player) is None:
                yield move


def legal_moves(board: Board, player: Player) -> list[Move]:
    """Generate all legal moves (board moves and validated drops)."""
    return list(iter_legal_moves(board, player))


def has_legal_move(board: Board, player: Player) -> bool:
    """最初の合法手が見つかった時点で打ち切る。"""
    return next(iter_legal_moves(board, player), None) is not None


def is_checkmate(board: Board, player: Player) -> bool:
    """詰み: 王手されていて、合法手が1つもない。"""
    return is_in_check(board, player) and not has_legal_move(board, player)
