"""Movement patterns for each piece type.

駒の動きの「方向」だけを返す純粋関数。盤面の占有状況は見ない。
盤外に出る方向もそのまま返し、呼び出し側（moves.py）が除外する。

方向は先手視点（前 = 行インデックス減少）で定義し、後手は行方向を反転する。
"""

from __future__ import annotations

from dataclasses import dataclass

from shogi_rules.types import PieceType, Player, Square

Direction = tuple[int, int]

_FORWARD3: list[Direction] = [(-1, -1), (-1, 0), (-1, 1)]
_ORTHOGONAL: list[Direction] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
_DIAGONAL: list[Direction] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
# 金と同じ動き: 前3方向 + 左右 + 真後ろ
_GOLD: list[Direction] = _FORWARD3 + [(0, -1), (0, 1), (1, 0)]

# 1マス（または桂馬の跳び）で動く方向
STEP_MOVES: dict[PieceType, list[Direction]] = {
    PieceType.PAWN: [(-1, 0)],
    PieceType.KNIGHT: [(-2, -1), (-2, 1)],  # 前方2マス+左右1マス（跳び）
    PieceType.SILVER: _FORWARD3 + [(1, -1), (1, 1)],  # 前3方向+斜め後ろ
    PieceType.GOLD: _GOLD,
    PieceType.KING: _ORTHOGONAL + _DIAGONAL,
    PieceType.PRO_PAWN: _GOLD,
    PieceType.PRO_LANCE: _GOLD,
    PieceType.PRO_KNIGHT: _GOLD,
    PieceType.PRO_SILVER: _GOLD,
    PieceType.HORSE: _ORTHOGONAL,  # 馬: 斜めの遠距離 + 縦横1マス
    PieceType.DRAGON: _DIAGONAL,   # 龍: 縦横の遠距離 + 斜め1マス
}

# 遠距離移動の方向（同方向に繰り返し進める）
SLIDE_MOVES: dict[PieceType, list[Direction]] = {
    PieceType.LANCE: [(-1, 0)],
    PieceType.BISHOP: _DIAGONAL,
    PieceType.ROOK: _ORTHOGONAL,
    PieceType.HORSE: _DIAGONAL,
    PieceType.DRAGON: _ORTHOGONAL,
}


@dataclass(frozen=True)
class MovementPattern:
    """Direction vectors for one piece at one square.

    steps:  1回だけ進める方向（桂馬の跳びを含む）
    slides: 駒にぶつかるか盤端まで進み続けられる方向
    """

    steps: tuple[Direction, ...]
    slides: tuple[Direction, ...]

    @property
    def is_ranged(self) -> bool:
        return bool(self.slides)


def movement_pattern(
    piece_type: PieceType, square: Square | tuple[int, int], player: Player
) -> MovementPattern:
    """Return the movement directions of ``piece_type`` owned by ``player``.

    square は純粋性のため受け取るだけで、方向は位置に依存しない。
    盤端付近でも全方向を返す（全域関数）。
    """
    flip = player == Player.GOTE

    def orient(dirs: list[Direction]) -> tuple[Direction, ...]:
        if flip:
            return tuple((-dr, -dc) for dr, dc in dirs)
        return tuple(dirs)

    return MovementPattern(
        steps=orient(STEP_MOVES.get(piece_type, [])),
        slides=orient(SLIDE_MOVES.get(piece_type, [])),
    )


def target_squares(pattern: MovementPattern, square: Square | tuple[int, int]) -> list[Square]:
    """Single-step targets of a pattern, without bounds filtering.

    遠距離方向は1マス目だけを含める。
    """
    row, col = square
    return [Square(row + dr, col + dc) for dr, dc in pattern.steps + pattern.slides]
