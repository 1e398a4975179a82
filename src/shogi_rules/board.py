"""Board representation for 本将棋 (9x9).

9×9盤の盤面データ構造。イミュータブルなデータクラスで、
変更メソッドは常に新しいオブジェクトを返す（元の盤面は変化しない）。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from shogi_rules.errors import InvariantViolation
from shogi_rules.types import (
    COLS,
    HAND_PIECE_TYPES,
    NUM_SQUARES,
    ROWS,
    PieceType,
    Player,
    Square,
    demote,
    in_bounds,
    promote,
)


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    盤面上の駒。種類と所有者を持つ。
    """

    piece_type: PieceType
    owner: Player


@dataclass(frozen=True)
class Hands:
    """Immutable captured-piece multisets for both players.

    持ち駒。pieces[0]=先手、pieces[1]=後手。
    各要素はソート済みのタプルで、成り駒は入らない（取った時点で元に戻す）。
    """

    pieces: tuple[tuple[PieceType, ...], tuple[PieceType, ...]] = ((), ())

    def __post_init__(self) -> None:
        # 各側をソート済みタプルに正規化する
        sides = tuple(tuple(sorted(side)) for side in self.pieces)
        if len(sides) != 2:
            raise InvariantViolation(f"Hands must have two sides, got {len(sides)}")
        for side in sides:
            for pt in side:
                if pt not in HAND_PIECE_TYPES:
                    raise InvariantViolation(f"{PieceType(pt).name} cannot be held in hand")
        object.__setattr__(self, "pieces", sides)

    def of(self, player: Player) -> tuple[PieceType, ...]:
        return self.pieces[player.value]

    def count(self, player: Player, piece_type: PieceType) -> int:
        return self.pieces[player.value].count(piece_type)

    def kinds(self, player: Player) -> list[PieceType]:
        """持っている駒種（重複なし、昇順）。"""
        return sorted(set(self.pieces[player.value]))

    def is_empty(self) -> bool:
        return not self.pieces[0] and not self.pieces[1]

    def add(self, player: Player, piece_type: PieceType) -> Hands:
        """Add a captured piece, reverting promoted pieces to base form.

        例: 龍（成り飛）を取ったら、飛車として持ち駒に加える。
        """
        base_type = demote(piece_type)
        if base_type not in HAND_PIECE_TYPES:
            raise InvariantViolation(f"{piece_type.name} cannot be held in hand")
        hand = sorted(self.pieces[player.value] + (base_type,))
        return self._replace(player, tuple(hand))

    def remove(self, player: Player, piece_type: PieceType) -> Hands:
        """持ち駒から1枚取り除いた新しい Hands を返す。"""
        hand = list(self.pieces[player.value])
        if piece_type not in hand:
            raise InvariantViolation(
                f"{player.name} has no {piece_type.name} in hand"
            )
        hand.remove(piece_type)
        return self._replace(player, tuple(hand))

    def _replace(self, player: Player, hand: tuple[PieceType, ...]) -> Hands:
        if player == Player.SENTE:
            return Hands((hand, self.pieces[1]))
        return Hands((self.pieces[0], hand))


@dataclass(frozen=True)
class Move:
    """A board move or a drop.

    from_sq が None なら持ち駒を打つ手。
    piece_type が None なのは USI 文字列から復元した直後だけで、
    盤面を参照して埋めてから使う（sfen.resolve_move）。
    """

    to: Square
    piece_type: PieceType | None
    from_sq: Square | None = None
    promote: bool = False
    captured: PieceType | None = None

    def __post_init__(self) -> None:
        # (row, col) のタプルでも受け付ける
        object.__setattr__(self, "to", Square(*self.to))
        if self.from_sq is not None:
            object.__setattr__(self, "from_sq", Square(*self.from_sq))

    @property
    def is_drop(self) -> bool:
        return self.from_sq is None


@dataclass(frozen=True)
class Board:
    """Immutable board state for 9x9 本将棋.

    squares: 81要素のタプル（行優先）。squares[row * COLS + col] でアクセス。
    hands:   両者の持ち駒。
    """

    squares: tuple[Piece | None, ...] = field(
        default_factory=lambda: Board._initial_squares()
    )
    hands: Hands = field(default_factory=Hands)

    @classmethod
    def empty(cls, hands: Hands | None = None) -> Board:
        """駒が1枚もない盤面（テストや局面編集用）。"""
        return cls(squares=(None,) * NUM_SQUARES, hands=hands or Hands())

    @staticmethod
    def _initial_squares() -> tuple[Piece | None, ...]:
        """Return the standard starting position (平手).

        Row 0 = 後手の後段（上端）、Row 8 = 先手の後段（下端）。
        列0が9筋。角・飛の位置は SFEN の "1b5r1" / "1R5B1" に一致させている。
        """
        squares: list[Piece | None] = [None] * NUM_SQUARES

        back_rank = [
            PieceType.LANCE, PieceType.KNIGHT, PieceType.SILVER,
            PieceType.GOLD, PieceType.KING, PieceType.GOLD,
            PieceType.SILVER, PieceType.KNIGHT, PieceType.LANCE,
        ]
        for c, pt in enumerate(back_rank):
            squares[0 * COLS + c] = Piece(pt, Player.GOTE)
            squares[8 * COLS + c] = Piece(pt, Player.SENTE)

        # Row 1: 後手の角・飛
        squares[1 * COLS + 1] = Piece(PieceType.BISHOP, Player.GOTE)
        squares[1 * COLS + 7] = Piece(PieceType.ROOK, Player.GOTE)

        for c in range(COLS):
            squares[2 * COLS + c] = Piece(PieceType.PAWN, Player.GOTE)
            squares[6 * COLS + c] = Piece(PieceType.PAWN, Player.SENTE)

        # Row 7: 先手の飛・角（後手と点対称）
        squares[7 * COLS + 1] = Piece(PieceType.ROOK, Player.SENTE)
        squares[7 * COLS + 7] = Piece(PieceType.BISHOP, Player.SENTE)

        return tuple(squares)

    def piece_at(self, row: int, col: int) -> Piece | None:
        """マス(row, col)の駒を返す。駒がなければ None。"""
        return self.squares[row * COLS + col]

    def set_piece(self, row: int, col: int, piece: Piece | None) -> Board:
        """マス(row, col)の駒を変更した新しい Board を返す。"""
        idx = row * COLS + col
        squares = list(self.squares)
        squares[idx] = piece
        return Board(squares=tuple(squares), hands=self.hands)

    def with_hands(self, hands: Hands) -> Board:
        return Board(squares=self.squares, hands=hands)

    def add_to_hand(self, player: Player, piece_type: PieceType) -> Board:
        """取った駒を持ち駒に追加する。成り駒は元の駒種に戻す。"""
        return self.with_hands(self.hands.add(player, piece_type))

    def remove_from_hand(self, player: Player, piece_type: PieceType) -> Board:
        """持ち駒から1枚取り除いた新しい Board を返す。"""
        return self.with_hands(self.hands.remove(player, piece_type))

    def pieces(self, player: Player | None = None) -> Iterator[tuple[Square, Piece]]:
        """盤上の駒を (マス, 駒) で列挙する。player 指定時はその駒だけ。"""
        for idx, piece in enumerate(self.squares):
            if piece is None:
                continue
            if player is not None and piece.owner != player:
                continue
            yield Square(idx // COLS, idx % COLS), piece

    def find_king(self, player: Player) -> Square | None:
        """プレイヤーの王将のマスを返す。王将がなければ None。

        テスト用の部分的な盤面では王がいないこともある。
        """
        for square, piece in self.pieces(player):
            if piece.piece_type == PieceType.KING:
                return square
        return None

    def has_unpromoted_pawn_in_column(self, player: Player, col: int) -> bool:
        """二歩判定: 指定列にプレイヤーの未成歩があれば True（と金は数えない）。"""
        for r in range(ROWS):
            p = self.piece_at(r, col)
            if p is not None and p.owner == player and p.piece_type == PieceType.PAWN:
                return True
        return False


def apply_move(board: Board, player: Player, move: Move) -> Board:
    """Return the board after ``player`` plays ``move``.

    盤面に手を適用した新しい Board を返す（元の盤面は変更しない）。
    検証済みの手を前提とするため、移動元に駒がない・持ち駒にない駒を打つ
    といった誤用は InvariantViolation で中断する。
    """
    if move.is_drop:
        return _apply_drop(board, player, move)
    return _apply_board_move(board, move)


def _apply_board_move(board: Board, move: Move) -> Board:
    from_sq = move.from_sq
    assert from_sq is not None
    if not in_bounds(*from_sq) or not in_bounds(*move.to):
        raise InvariantViolation(f"Move outside the board: {move}")

    piece = board.piece_at(*from_sq)
    if piece is None:
        raise InvariantViolation(f"No piece at {tuple(from_sq)}")

    new_board = board
    target = board.piece_at(*move.to)
    if target is not None and target.owner == piece.owner:
        raise InvariantViolation(f"Move onto own piece at {tuple(move.to)}")
    if target is not None and target.piece_type != PieceType.KING:
        # 取った駒は成りを戻して持ち駒へ（玉は持ち駒にならない）
        new_board = new_board.add_to_hand(piece.owner, target.piece_type)

    new_type = promote(piece.piece_type) if move.promote else piece.piece_type
    new_board = new_board.set_piece(from_sq.row, from_sq.col, None)
    return new_board.set_piece(move.to.row, move.to.col, Piece(new_type, piece.owner))


def _apply_drop(board: Board, player: Player, move: Move) -> Board:
    if move.piece_type is None:
        raise InvariantViolation("Drop without a piece type")
    if not in_bounds(*move.to):
        raise InvariantViolation(f"Drop outside the board: {move}")
    if board.piece_at(*move.to) is not None:
        raise InvariantViolation(f"Drop onto occupied square {tuple(move.to)}")

    new_board = board.remove_from_hand(player, move.piece_type)
    return new_board.set_piece(move.to.row, move.to.col, Piece(move.piece_type, player))
