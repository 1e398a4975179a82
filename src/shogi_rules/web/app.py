"""FastAPI application exposing the rules engine over HTTP.

ルールエンジンを HTTP で公開する。サーバ側に対局は保存しない（ステートレス）。
リクエストごとに SFEN と局面履歴を受け取り、判定結果を返す。

エンドポイント:
  GET  /api/position?sfen=...  — 局面の解析結果・合法手・状態
  POST /api/move               — 手を検証して適用し、次の局面を返す
  POST /api/status             — 状態判定（千日手・王手・入玉宣言）
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from shogi_rules.config import RuleConfig
from shogi_rules.display import format_board
from shogi_rules.errors import IllegalMove, MalformedNotation
from shogi_rules.judge import can_declare_win
from shogi_rules.sfen import INITIAL_SFEN
from shogi_rules.state import GameState

logger = logging.getLogger(__name__)

app = FastAPI(title="Shogi Rules")


class MoveRequest(BaseModel):
    """指し手リクエストのスキーマ。"""

    sfen: str = INITIAL_SFEN
    move: str  # USI 形式（例: 7g7f, P*5e, 2h8b+）
    history: list[str] = Field(default_factory=list)  # 過去の局面の正規形


class StatusRequest(BaseModel):
    """状態判定リクエストのスキーマ。"""

    sfen: str = INITIAL_SFEN
    history: list[str] = Field(default_factory=list)
    declare_win_points: int = 24


def _load(sfen: str, history: list[str], config: RuleConfig | None = None) -> GameState:
    """SFEN を解析する。形式が不正なら 400 を返す。"""
    try:
        if config is None:
            return GameState.from_sfen(sfen, tuple(history))
        return GameState.from_sfen(sfen, tuple(history), config)
    except MalformedNotation as exc:
        raise HTTPException(400, f"Malformed SFEN: {exc}") from exc


def _state_to_dict(state: GameState) -> dict[str, Any]:
    """Convert game state to a JSON-serializable dict."""
    squares: list[dict[str, Any] | None] = []
    for piece in state.board.squares:
        if piece is None:
            squares.append(None)
        else:
            squares.append(
                {
                    "type": piece.piece_type.value,
                    "owner": piece.owner.value,
                    "name": piece.piece_type.name,
                }
            )
    return {
        "sfen": state.to_sfen(),
        "record": state.record,
        "side_to_move": state.side_to_move.value,
        "status": state.status.value,
        "in_check": state.in_check,
        "legal_moves": state.legal_usi_moves(),
        "squares": squares,
        "hands": [
            [pt.name for pt in state.board.hands.pieces[0]],
            [pt.name for pt in state.board.hands.pieces[1]],
        ],
        "board_display": format_board(state.board),
    }


@app.get("/api/position")
async def get_position(sfen: str = INITIAL_SFEN) -> dict[str, Any]:
    """局面を解析して、合法手と状態を返す。"""
    return _state_to_dict(_load(sfen, []))


@app.post("/api/move")
async def make_move(req: MoveRequest) -> dict[str, Any]:
    """Validate and apply one move.

    反則手は HTTP エラーにせず accepted=false と理由を返す
    （UI 側が「なぜ指せないか」を表示できるように）。
    """
    state = _load(req.sfen, req.history)
    try:
        next_state = state.play_usi(req.move)
    except MalformedNotation as exc:
        raise HTTPException(400, f"Malformed move: {exc}") from exc
    except IllegalMove as exc:
        logger.debug("Rejected %s at %s: %s", req.move, req.sfen, exc.reason.value)
        return _move_result(state, exc.reason.value)

    return _move_result(next_state, None)


def _move_result(state: GameState, reason: str | None) -> dict[str, Any]:
    return {
        "accepted": reason is None,
        "reason": reason,
        "sfen": state.to_sfen(),
        "status": state.status.value,
        "record": state.record,
        "history": list(state.history),
        "state": _state_to_dict(state),
    }


@app.post("/api/status")
async def get_status(req: StatusRequest) -> dict[str, Any]:
    """千日手を含む状態判定と入玉宣言の可否を返す。"""
    config = RuleConfig(declare_win_points=req.declare_win_points, allow_declared_win=True)
    state = _load(req.sfen, req.history, config)
    return {
        "status": state.status.value,
        "in_check": state.in_check,
        "can_declare_win": can_declare_win(state.board, state.side_to_move, config),
        "record": state.record,
    }


def main() -> None:
    """Run the web server.

    `shogi-web` または `python -m shogi_rules.web.app` で起動する。
    """
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
