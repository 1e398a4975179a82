"""CLI entry point for shogi-rules.

局面（SFEN）を渡して、状態判定・合法手一覧・指し手の適用を行うコマンド。

使用例:
  shogi-rules status startpos
  shogi-rules moves "lnsgkgsnl/1b5r1/ppppppppp/9/9/9/PPPPPPPPP/1R5B1/LNSGKGSNL b - 1"
  shogi-rules play 3g3f 7c7d 2h8b+
"""

from __future__ import annotations

import argparse
import logging

from shogi_rules.display import format_board
from shogi_rules.errors import IllegalMove, MalformedNotation
from shogi_rules.sfen import INITIAL_SFEN
from shogi_rules.state import GameState
from shogi_rules.types import Player

logger = logging.getLogger(__name__)


def _print_summary(state: GameState) -> None:
    print(format_board(state.board))
    print()
    print(f"手番: {'先手' if state.side_to_move == Player.SENTE else '後手'}")
    print(f"状態: {state.status.value}")
    if state.can_declare_win():
        print("入玉宣言: 可能")
    print(f"SFEN: {state.to_sfen()}")


def _cmd_status(args: argparse.Namespace) -> int:
    _print_summary(GameState.from_sfen(args.sfen))
    return 0


def _cmd_moves(args: argparse.Namespace) -> int:
    state = GameState.from_sfen(args.sfen)
    moves = state.legal_usi_moves()
    for usi in moves:
        print(usi)
    logger.info("%d legal moves", len(moves))
    return 0


def _cmd_play(args: argparse.Namespace) -> int:
    state = GameState.from_sfen(args.sfen)
    for usi in args.moves:
        try:
            state = state.play_usi(usi)
        except IllegalMove as exc:
            print(f"Illegal move {usi}: {exc.reason.value}")
            return 1
        except MalformedNotation as exc:
            print(f"Malformed move {usi}: {exc}")
            return 1
    _print_summary(state)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shogi-rules",
        description="Shogi rules engine: legality, status and SFEN/USI notation.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_status = sub.add_parser("status", help="show board and game status")
    p_status.add_argument("sfen", nargs="?", default=INITIAL_SFEN)
    p_status.set_defaults(func=_cmd_status)

    p_moves = sub.add_parser("moves", help="list legal moves as USI strings")
    p_moves.add_argument("sfen", nargs="?", default=INITIAL_SFEN)
    p_moves.set_defaults(func=_cmd_moves)

    p_play = sub.add_parser("play", help="apply USI moves in order")
    p_play.add_argument("--sfen", default=INITIAL_SFEN, help="starting position")
    p_play.add_argument("moves", nargs="+", help="USI moves, e.g. 3g3f P*5e 2h8b+")
    p_play.set_defaults(func=_cmd_play)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the selected sub-command."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except MalformedNotation as exc:
        print(f"Malformed notation: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
