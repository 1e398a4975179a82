"""Rule configuration.

ルールのバリエーション（千日手の回数・入玉宣言の点数）をまとめた設定。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleConfig:
    """Tunable rule parameters.

    Attributes:
        repetition_threshold: 千日手とみなす「履歴中の同一局面の出現回数」。
                              3 なら現局面が4回目の出現で千日手。
        declare_win_points:   入玉宣言に必要な敵陣内の駒の点数
        allow_declared_win:   入玉宣言勝ちを有効にするか
    """

    repetition_threshold: int = 3
    declare_win_points: int = 24
    allow_declared_win: bool = False


DEFAULT_RULES = RuleConfig()
