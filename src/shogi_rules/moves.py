"""Legal destination filtering and attack detection for 本将棋.

盤面を参照して「その駒が単独でどこへ行けるか」を求める。
1. reachable_squares:  盤外・自駒・遮りを考慮した到達可能マス（疑似合法）
2. legal_destinations: さらに自玉が王手されたままになるマスを除いたもの

王手判定（is_in_check）もここに置き、validation.py と judge.py の両方から使う。
"""

from __future__ import annotations

from shogi_rules.board import Board, Move, Piece, apply_move
from shogi_rules.patterns import MovementPattern, movement_pattern
from shogi_rules.types import (
    PieceType,
    Player,
    PromotionStatus,
    Square,
    in_bounds,
    promotion_zone,
    rows_from_far_end,
)


def reachable_squares(board: Board, square: Square | tuple[int, int]) -> list[Square]:
    """Squares the piece on ``square`` can reach, ignoring king safety.

    - 1マス移動: 盤外と自駒のマスを除く
    - 遠距離移動: 1マスずつ進み、自駒の手前で止まる。相手駒は取って止まる。
    空きマスなら駒がいない。
    """
    piece = board.piece_at(*square)
    if piece is None:
        return []
    pattern = movement_pattern(piece.piece_type, square, piece.owner)
    return _walk(board, Square(*square), pattern, piece.owner)


def _walk(
    board: Board,
    square: Square,
    pattern: MovementPattern,
    owner: Player,
) -> list[Square]:
    row, col = square
    result: list[Square] = []

    for dr, dc in pattern.steps:
        nr, nc = row + dr, col + dc
        if not in_bounds(nr, nc):
            continue
        target = board.piece_at(nr, nc)
        if target is None or target.owner != owner:
            result.append(Square(nr, nc))

    for dr, dc in pattern.slides:
        nr, nc = row + dr, col + dc
        while in_bounds(nr, nc):
            target = board.piece_at(nr, nc)
            if target is not None and target.owner == owner:
                break
            result.append(Square(nr, nc))
            if target is not None:
                break  # 取ったらそこで止まる
            nr, nc = nr + dr, nc + dc

    return result


def legal_destinations(board: Board, square: Square | tuple[int, int]) -> list[Square]:
    """Reachable squares that do not leave the mover's own king attacked.

    各移動先について盤面を複製して手を試し、自玉に王手が残る手を除く（王手放置禁止）。
    ピンされた駒が動けないのもこの処理による。
    """
    piece = board.piece_at(*square)
    if piece is None:
        return []
    from_sq = Square(*square)
    safe: list[Square] = []
    for to in reachable_squares(board, from_sq):
        trial = Move(to=to, piece_type=piece.piece_type, from_sq=from_sq)
        if not is_in_check(apply_move(board, piece.owner, trial), piece.owner):
            safe.append(to)
    return safe


def attacks_square(
    board: Board,
    from_sq: Square | tuple[int, int],
    target: Square | tuple[int, int],
) -> bool:
    """True if the piece on ``from_sq`` attacks ``target`` (blocking applies)."""
    return Square(*target) in reachable_squares(board, from_sq)


def checking_pieces(board: Board, player: Player) -> list[Square]:
    """Squares of opponent pieces currently giving check to ``player``'s king."""
    king = board.find_king(player)
    if king is None:
        return []
    return [
        square
        for square, _ in board.pieces(player.opponent)
        if attacks_square(board, square, king)
    ]


def is_in_check(board: Board, player: Player) -> bool:
    """Check if player's king is under attack.

    王がいない盤面（テスト用の部分的な局面）では False を返す。
    """
    king = board.find_king(player)
    if king is None:
        return False
    for square, _ in board.pieces(player.opponent):
        if attacks_square(board, square, king):
            return True
    return False


def promotion_status(piece: Piece, from_row: int, to_row: int) -> PromotionStatus:
    """Decide whether a board move must, may or cannot promote.

    敵陣（相手側の3段）に入る・敵陣内で動く・敵陣から出る手なら成れる。
    その先に動けなくなる場合（歩・香の最奥段、桂の奥2段）は強制成り。
    """
    pt = piece.piece_type
    if not pt.can_promote:
        return PromotionStatus.FORBIDDEN

    zone = promotion_zone(piece.owner)
    if from_row not in zone and to_row not in zone:
        return PromotionStatus.FORBIDDEN

    depth = rows_from_far_end(piece.owner, to_row)
    if pt in (PieceType.PAWN, PieceType.LANCE) and depth == 0:
        return PromotionStatus.REQUIRED
    if pt == PieceType.KNIGHT and depth <= 1:
        return PromotionStatus.REQUIRED
    return PromotionStatus.OPTIONAL


def expand_promotions(board: Board, from_sq: Square, to: Square) -> list[Move]:
    """Turn one destination into the board moves it allows.

    強制成り → 成る手1つ、選択可能 → 成らない手と成る手の2つ、
    成れない → 成らない手1つ。
    """
    piece = board.piece_at(*from_sq)
    assert piece is not None
    target = board.piece_at(*to)
    captured = target.piece_type if target is not None else None
    base = Move(to=to, piece_type=piece.piece_type, from_sq=from_sq, captured=captured)

    status = promotion_status(piece, from_sq.row, to.row)
    if status == PromotionStatus.REQUIRED:
        return [_with_promotion(base)]
    if status == PromotionStatus.OPTIONAL:
        return [base, _with_promotion(base)]
    return [base]


def _with_promotion(move: Move) -> Move:
    return Move(
        to=move.to,
        piece_type=move.piece_type,
        from_sq=move.from_sq,
        promote=True,
        captured=move.captured,
    )
