"""Terminal display for 本将棋.

盤面を人が読める文字列にする。後手の駒には 'v' を付ける（柿木形式に近い表記）。
"""

from __future__ import annotations

from shogi_rules.board import Board, Piece
from shogi_rules.sfen import HAND_ORDER
from shogi_rules.types import COLS, ROWS, PieceType, Player

PIECE_CHARS: dict[PieceType, str] = {
    PieceType.PAWN: "歩",
    PieceType.LANCE: "香",
    PieceType.KNIGHT: "桂",
    PieceType.SILVER: "銀",
    PieceType.GOLD: "金",
    PieceType.BISHOP: "角",
    PieceType.ROOK: "飛",
    PieceType.KING: "玉",
    PieceType.PRO_PAWN: "と",
    PieceType.PRO_LANCE: "杏",
    PieceType.PRO_KNIGHT: "圭",
    PieceType.PRO_SILVER: "全",
    PieceType.HORSE: "馬",
    PieceType.DRAGON: "龍",
}

_FILE_HEADER = "  " + " ".join("９８７６５４３２１")
_RANK_LABELS = "一二三四五六七八九"
_SEPARATOR = "+" + "--+" * COLS


def _cell(piece: Piece | None) -> str:
    if piece is None:
        return "  "
    mark = "v" if piece.owner == Player.GOTE else " "
    return mark + PIECE_CHARS[piece.piece_type]


def format_board(board: Board) -> str:
    """Format the board with both hands (gote on top)."""
    lines = [f"後手持駒: {format_hand(board, Player.GOTE)}", _FILE_HEADER, _SEPARATOR]
    for r in range(ROWS):
        cells = "|".join(_cell(board.piece_at(r, c)) for c in range(COLS))
        lines.append(f"|{cells}| {_RANK_LABELS[r]}")
        lines.append(_SEPARATOR)
    lines.append(f"先手持駒: {format_hand(board, Player.SENTE)}")
    return "\n".join(lines)


def format_hand(board: Board, player: Player) -> str:
    """持ち駒を 飛角金銀桂香歩 の順に並べる。2枚以上は枚数を付ける。"""
    parts: list[str] = []
    for pt in HAND_ORDER:
        count = board.hands.count(player, pt)
        if count:
            parts.append(PIECE_CHARS[pt] + (str(count) if count > 1 else ""))
    return " ".join(parts) or "なし"
