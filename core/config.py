"""
规则配置

定义可切换的规则变体
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union
import json

from .cards import Card, THREE_OF_DIAMONDS, parse_card


class StraightPolicy(Enum):
    """
    顺子判定规则

    - NO_WRAP: 按 3..2 的点数顺序连续的五张，2 之后不能接 3 (JQKA2 合法，A2345 不合法)
    - NO_TWO: 2 不能参与顺子，最大顺子为 10JQKA
    - CHO_DAI_DI: 港式规则，3..A 内的顺子外加 A2345、23456、JQKA2 三种特殊顺子
    """
    NO_WRAP = "no_wrap"
    NO_TWO = "no_two"
    CHO_DAI_DI = "cho_dai_di"


@dataclass(frozen=True)
class RuleConfig:
    """
    规则配置

    Attributes:
        straight_policy: 顺子判定规则
        opening_card: 开局牌，持有者先出
        opening_single_only: 首手是否只能单出开局牌 (False 时任意包含开局牌的合法牌型均可)
    """
    straight_policy: StraightPolicy = StraightPolicy.NO_WRAP
    opening_card: Card = THREE_OF_DIAMONDS
    opening_single_only: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'RuleConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}

        if isinstance(filtered.get("straight_policy"), str):
            filtered["straight_policy"] = StraightPolicy(filtered["straight_policy"])
        if isinstance(filtered.get("opening_card"), str):
            filtered["opening_card"] = parse_card(filtered["opening_card"])
        if "opening_single_only" in filtered:
            filtered["opening_single_only"] = bool(filtered["opening_single_only"])

        return cls(**filtered)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'RuleConfig':
        """从 JSON 文件加载"""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "straight_policy": self.straight_policy.value,
            "opening_card": self.opening_card.token,
            "opening_single_only": self.opening_single_only,
        }
