"""Types and constants for 本将棋 (9x9 shogi).

本将棋（9×9盤）の基本型・定数定義。
駒は14種類（未成7種 + 成り6種 + 王将）。
"""

from __future__ import annotations

from enum import Enum, IntEnum, unique
from typing import NamedTuple

ROWS = 9
COLS = 9
NUM_SQUARES = ROWS * COLS  # 81マス


class Square(NamedTuple):
    """A board coordinate.

    盤上のマス。row 0 = 後手の後段（一段目）、col 0 = 9筋。
    """

    row: int
    col: int


def in_bounds(row: int, col: int) -> bool:
    """(row, col) が盤内なら True。"""
    return 0 <= row < ROWS and 0 <= col < COLS


@unique
class Player(IntEnum):
    """Player identifiers.

    先手（SENTE）は下側から上に向かって進む（row 8 → row 0）。
    後手（GOTE）は上側から下に向かって進む（row 0 → row 8）。
    """

    SENTE = 0  # 先手
    GOTE = 1   # 後手

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。"""
        return Player(1 - self.value)

    @property
    def forward(self) -> int:
        """前進方向の行の増分（先手 -1、後手 +1）。"""
        return -1 if self == Player.SENTE else 1


@unique
class PieceType(IntEnum):
    """Piece types in 本将棋（14種類）.

    0〜6: 未成駒、7: 王将、8〜13: 成り駒
    """

    PAWN = 0         # 歩
    LANCE = 1        # 香
    KNIGHT = 2       # 桂
    SILVER = 3       # 銀
    GOLD = 4         # 金
    BISHOP = 5       # 角
    ROOK = 6         # 飛
    KING = 7         # 玉/王
    PRO_PAWN = 8     # と（成り歩）
    PRO_LANCE = 9    # 成香
    PRO_KNIGHT = 10  # 成桂
    PRO_SILVER = 11  # 成銀
    HORSE = 12       # 馬（成り角）
    DRAGON = 13      # 龍（成り飛）

    @property
    def is_promoted(self) -> bool:
        return self in UNPROMOTION_MAP

    @property
    def can_promote(self) -> bool:
        return self in PROMOTION_MAP


# 成り変換テーブル: 未成駒 → 成り駒
PROMOTION_MAP: dict[PieceType, PieceType] = {
    PieceType.PAWN: PieceType.PRO_PAWN,
    PieceType.LANCE: PieceType.PRO_LANCE,
    PieceType.KNIGHT: PieceType.PRO_KNIGHT,
    PieceType.SILVER: PieceType.PRO_SILVER,
    PieceType.BISHOP: PieceType.HORSE,
    PieceType.ROOK: PieceType.DRAGON,
}

# 逆変換: 成り駒 → 元の駒種（取られた駒を持ち駒に戻す際に使用）
UNPROMOTION_MAP: dict[PieceType, PieceType] = {v: k for k, v in PROMOTION_MAP.items()}

# 持ち駒として使える駒種（未成の非玉駒、7種）
HAND_PIECE_TYPES = [
    PieceType.PAWN, PieceType.LANCE, PieceType.KNIGHT,
    PieceType.SILVER, PieceType.GOLD, PieceType.BISHOP, PieceType.ROOK,
]

# 入玉宣言の点数計算で5点になる大駒
MAJOR_PIECE_TYPES = frozenset({
    PieceType.ROOK, PieceType.BISHOP, PieceType.DRAGON, PieceType.HORSE,
})


def promote(piece_type: PieceType) -> PieceType:
    """成った後の駒種を返す。成れない駒はそのまま。"""
    return PROMOTION_MAP.get(piece_type, piece_type)


def demote(piece_type: PieceType) -> PieceType:
    """成る前の駒種を返す。成り駒でなければそのまま。"""
    return UNPROMOTION_MAP.get(piece_type, piece_type)


def promotion_zone(player: Player) -> range:
    """敵陣（成れる3段）の行範囲を返す。"""
    if player == Player.SENTE:
        return range(0, 3)
    return range(ROWS - 3, ROWS)


def rows_from_far_end(player: Player, row: int) -> int:
    """相手側の端から数えた段数（最奥段 = 0）。

    行き所のない駒・強制成りの判定に使う。
    """
    if player == Player.SENTE:
        return row
    return ROWS - 1 - row


@unique
class PromotionStatus(Enum):
    """Whether a board move may, must or cannot promote."""

    REQUIRED = "required"    # 強制成り
    OPTIONAL = "optional"    # 選択可能
    FORBIDDEN = "forbidden"  # 成れない


@unique
class GameStatus(Enum):
    """Result of judging a position for the side to move.

    投了は対局管理側の概念なのでここには含めない。
    """

    PLAYING = "playing"
    CHECK = "check"            # 王手
    CHECKMATE = "checkmate"    # 詰み
    STALEMATE = "stalemate"    # 合法手なし（王手なし）
    REPETITION = "repetition"  # 千日手

    @property
    def is_terminal(self) -> bool:
        return self in (GameStatus.CHECKMATE, GameStatus.STALEMATE, GameStatus.REPETITION)
