"""SFEN position strings and USI move strings.

局面（SFEN）と指し手（USI）の文字列変換。外部の思考エンジンとの
やり取りや局面の保存に使う。合法性は判定しない（validation.py の役割）。

例: lnsgkgsnl/1b5r1/ppppppppp/9/9/9/PPPPPPPPP/1R5B1/LNSGKGSNL b - 1

フォーマット:
1. 盤面: 9段を '/' で区切る。後手側（row 0）から先手側（row 8）へ、
   各段は9筋（col 0）から1筋（col 8）へ。空きマスは連続数でまとめる。
2. 手番: b=先手, w=後手
3. 持ち駒: 先手（大文字）→ 後手（小文字）、各々 飛角金銀桂香歩 の順。
   2枚以上なら枚数を前置。なければ '-'
4. 手数

指し手: 7g7f（筋 = 9 - col、段 = 'a' + row）、成りは末尾に '+'、
打ち手は P*5e のように駒種を大文字で書く。
"""

from __future__ import annotations

from collections import Counter
from typing import NamedTuple

from shogi_rules.board import Board, Hands, Move, Piece
from shogi_rules.errors import MalformedNotation
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

INITIAL_SFEN = "lnsgkgsnl/1b5r1/ppppppppp/9/9/9/PPPPPPPPP/1R5B1/LNSGKGSNL b - 1"

_BASE_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "P",
    PieceType.LANCE: "L",
    PieceType.KNIGHT: "N",
    PieceType.SILVER: "S",
    PieceType.GOLD: "G",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.KING: "K",
}
_LETTER_TO_BASE: dict[str, PieceType] = {v: k for k, v in _BASE_LETTERS.items()}

# 持ち駒の表記順: 飛角金銀桂香歩
HAND_ORDER = [
    PieceType.ROOK, PieceType.BISHOP, PieceType.GOLD, PieceType.SILVER,
    PieceType.KNIGHT, PieceType.LANCE, PieceType.PAWN,
]

# 駒の総数（成り駒は元の駒種で数える）
PIECE_SUPPLY: dict[PieceType, int] = {
    PieceType.PAWN: 18,
    PieceType.LANCE: 4,
    PieceType.KNIGHT: 4,
    PieceType.SILVER: 4,
    PieceType.GOLD: 4,
    PieceType.BISHOP: 2,
    PieceType.ROOK: 2,
    PieceType.KING: 2,
}


def piece_to_letter(piece: Piece) -> str:
    """駒を SFEN の文字に変換する。先手は大文字、後手は小文字、成り駒は '+' 付き。"""
    pt = piece.piece_type
    letter = _BASE_LETTERS[demote(pt)]
    if pt.is_promoted:
        letter = "+" + letter
    return letter if piece.owner == Player.SENTE else letter.lower()


def board_to_sfen(board: Board, side: Player, move_number: int = 1) -> str:
    """Encode a board, side to move and move number as an SFEN string."""
    return f"{_encode_position(board, side)} {move_number}"


def position_record(board: Board, side: Player) -> str:
    """Canonical key for repetition detection.

    千日手判定用。手数を含めると同一局面が一致しなくなるので除く。
    """
    return _encode_position(board, side)


def _encode_position(board: Board, side: Player) -> str:
    side_char = "b" if side == Player.SENTE else "w"
    return f"{_encode_rows(board)} {side_char} {_encode_hands(board.hands)}"


def _encode_rows(board: Board) -> str:
    ranks: list[str] = []
    for r in range(ROWS):
        parts: list[str] = []
        empties = 0
        for c in range(COLS):
            piece = board.piece_at(r, c)
            if piece is None:
                empties += 1
                continue
            if empties:
                parts.append(str(empties))
                empties = 0
            parts.append(piece_to_letter(piece))
        if empties:
            parts.append(str(empties))
        ranks.append("".join(parts))
    return "/".join(ranks)


def _encode_hands(hands: Hands) -> str:
    parts: list[str] = []
    for player in Player:
        for pt in HAND_ORDER:
            count = hands.count(player, pt)
            if count == 0:
                continue
            if count > 1:
                parts.append(str(count))
            parts.append(piece_to_letter(Piece(pt, player)))
    return "".join(parts) or "-"


def sfen_to_board(sfen: str) -> tuple[Board, Player, int]:
    """Decode an SFEN string into (board, side to move, move number).

    'startpos' は初期局面として扱う。形式が不正なら MalformedNotation。
    """
    text = (sfen or "").strip()
    if text.startswith("sfen "):
        text = text[len("sfen "):].strip()
    if text == "startpos":
        text = INITIAL_SFEN

    parts = text.split()
    if len(parts) != 4:
        raise MalformedNotation(f"SFEN must have 4 fields: {sfen!r}")
    board_part, side_part, hand_part, number_part = parts

    if side_part not in ("b", "w"):
        raise MalformedNotation(f"Side to move must be 'b' or 'w': {side_part!r}")
    side = Player.SENTE if side_part == "b" else Player.GOTE

    if " ".join(parts) != text:
        raise MalformedNotation(f"SFEN fields must be separated by single spaces: {sfen!r}")
    if not number_part.isdigit() or int(number_part) < 1 or number_part[0] == "0":
        raise MalformedNotation(f"Move number must be a positive integer: {number_part!r}")

    squares = _parse_rows(board_part)
    board = Board(squares=squares, hands=_parse_hands(hand_part))
    _check_supply(board)
    return board, side, int(number_part)


def _parse_rows(board_part: str) -> tuple[Piece | None, ...]:
    ranks = board_part.split("/")
    if len(ranks) != ROWS:
        raise MalformedNotation(f"Board must have {ROWS} ranks, got {len(ranks)}")

    squares: list[Piece | None] = [None] * NUM_SQUARES
    for r, rank in enumerate(ranks):
        c = 0
        i = 0
        after_digit = False
        while i < len(rank):
            ch = rank[i]
            if ch in "123456789":
                # 連続する空きマスは1つの数字にまとめる（"45" は不可）
                if after_digit:
                    raise MalformedNotation(f"Split empty run in rank {r + 1}: {rank!r}")
                c += int(ch)
                i += 1
                after_digit = True
                continue
            after_digit = False
            promoted = ch == "+"
            if promoted:
                i += 1
                if i >= len(rank):
                    raise MalformedNotation(f"Dangling '+' in rank {r + 1}: {rank!r}")
                ch = rank[i]
            base = _LETTER_TO_BASE.get(ch.upper())
            if base is None:
                raise MalformedNotation(f"Invalid piece letter {ch!r} in rank {rank!r}")
            pt = base
            if promoted:
                if not base.can_promote:
                    raise MalformedNotation(f"{base.name} cannot be promoted: {rank!r}")
                pt = promote(base)
            if c >= COLS:
                raise MalformedNotation(f"Rank {r + 1} has more than {COLS} squares: {rank!r}")
            owner = Player.SENTE if ch.isupper() else Player.GOTE
            squares[r * COLS + c] = Piece(pt, owner)
            c += 1
            i += 1
        if c != COLS:
            raise MalformedNotation(f"Rank {r + 1} must span {COLS} squares: {rank!r}")
    return tuple(squares)


def _parse_hands(hand_part: str) -> Hands:
    """持ち駒欄を読む。

    board_to_sfen が出力する正規形だけを受け付ける: 先手 → 後手、
    各々 HAND_ORDER の順で同じ駒は1回だけ、枚数は2以上のときだけ前置。
    """
    if hand_part == "-":
        return Hands()

    sides: tuple[list[PieceType], list[PieceType]] = ([], [])
    last_key = (-1, -1)
    num_buf = ""
    for ch in hand_part:
        if ch.isdigit():
            num_buf += ch
            continue
        pt = _LETTER_TO_BASE.get(ch.upper())
        if pt is None or pt not in HAND_PIECE_TYPES:
            raise MalformedNotation(f"Invalid hand piece {ch!r} in {hand_part!r}")
        if num_buf and (num_buf[0] == "0" or int(num_buf) < 2):
            raise MalformedNotation(f"Invalid hand count {num_buf!r} in {hand_part!r}")
        count = int(num_buf) if num_buf else 1
        num_buf = ""

        owner = Player.SENTE if ch.isupper() else Player.GOTE
        key = (owner.value, HAND_ORDER.index(pt))
        if key <= last_key:
            raise MalformedNotation(f"Hand pieces out of order or repeated: {hand_part!r}")
        last_key = key
        sides[owner.value].extend([pt] * count)
    if num_buf:
        raise MalformedNotation(f"Dangling count in hands: {hand_part!r}")
    return Hands((tuple(sides[0]), tuple(sides[1])))


def _check_supply(board: Board) -> None:
    """盤上と持ち駒を合わせた枚数が駒の総数（40枚の内訳）を超えていないか。"""
    counts: Counter[PieceType] = Counter(demote(p.piece_type) for _, p in board.pieces())
    for player in Player:
        counts.update(board.hands.of(player))
    for pt, count in counts.items():
        if count > PIECE_SUPPLY[pt]:
            raise MalformedNotation(
                f"Too many {pt.name} pieces: {count} (at most {PIECE_SUPPLY[pt]})"
            )


def square_to_usi(square: Square | tuple[int, int]) -> str:
    row, col = square
    if not in_bounds(row, col):
        raise MalformedNotation(f"Square out of range: {(row, col)}")
    return f"{9 - col}{chr(ord('a') + row)}"


def usi_to_square(text: str) -> Square:
    if len(text) != 2 or text[0] not in "123456789" or text[1] not in "abcdefghi":
        raise MalformedNotation(f"Invalid USI square: {text!r}")
    return Square(ord(text[1]) - ord("a"), 9 - int(text[0]))


def move_to_usi(move: Move) -> str:
    """Encode a move as a USI string (7g7f, 8h2b+, P*5e)."""
    to = square_to_usi(move.to)
    if move.is_drop:
        if move.piece_type is None:
            raise MalformedNotation("Drop without a piece type")
        return f"{_BASE_LETTERS[move.piece_type]}*{to}"
    assert move.from_sq is not None
    suffix = "+" if move.promote else ""
    return f"{square_to_usi(move.from_sq)}{to}{suffix}"


def usi_to_move(text: str) -> Move:
    """Decode a USI move string.

    盤上の手は文字列から駒種を復元できないため piece_type=None を返す。
    使う前に resolve_move で盤面から埋めること。
    """
    s = (text or "").strip()
    if len(s) == 4 and s[1] == "*":
        pt = _LETTER_TO_BASE.get(s[0])
        if pt is None or pt not in HAND_PIECE_TYPES:
            raise MalformedNotation(f"Invalid drop piece: {s!r}")
        return Move(to=usi_to_square(s[2:4]), piece_type=pt)

    if len(s) not in (4, 5) or (len(s) == 5 and s[4] != "+"):
        raise MalformedNotation(f"Invalid USI move: {text!r}")
    return Move(
        to=usi_to_square(s[2:4]),
        piece_type=None,
        from_sq=usi_to_square(s[0:2]),
        promote=len(s) == 5,
    )


def resolve_move(board: Board, move: Move) -> Move:
    """Fill in the moved piece type and captured piece from ``board``.

    移動元に駒がない場合は piece_type=None のまま返し、検証で弾かせる。
    """
    if move.is_drop:
        return move
    assert move.from_sq is not None
    piece = board.piece_at(*move.from_sq) if in_bounds(*move.from_sq) else None
    target = board.piece_at(*move.to) if in_bounds(*move.to) else None
    return Move(
        to=move.to,
        piece_type=piece.piece_type if piece is not None else None,
        from_sq=move.from_sq,
        promote=move.promote,
        captured=target.piece_type if target is not None else None,
    )


class BestMove(NamedTuple):
    """A parsed ``bestmove`` response from a USI engine.

    move:    指し手（投了・勝ち宣言なら None）
    ponder:  予想手（あれば）
    special: "resign" / "win"（通常の手なら None）
    """

    move: Move | None
    ponder: str | None = None
    special: str | None = None


def parse_bestmove(line: str) -> BestMove:
    """Parse ``bestmove <move> [ponder <move>]``."""
    parts = (line or "").split()
    if len(parts) < 2 or parts[0] != "bestmove":
        raise MalformedNotation(f"Not a bestmove line: {line!r}")
    ponder = parts[3] if len(parts) >= 4 and parts[2] == "ponder" else None
    if parts[1] in ("resign", "win"):
        return BestMove(move=None, ponder=None, special=parts[1])
    return BestMove(move=usi_to_move(parts[1]), ponder=ponder)
