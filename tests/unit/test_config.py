"""规则配置测试"""
import json

import pytest

from core.cards import THREE_OF_DIAMONDS, str_to_cards
from core.config import RuleConfig, StraightPolicy


class TestRuleConfig:
    """RuleConfig 测试"""

    def test_defaults(self):
        config = RuleConfig()
        assert config.straight_policy == StraightPolicy.NO_WRAP
        assert config.opening_card == THREE_OF_DIAMONDS
        assert config.opening_single_only is True

    def test_from_dict(self):
        config = RuleConfig.from_dict({
            "straight_policy": "cho_dai_di",
            "opening_card": "3c",
            "opening_single_only": False,
            "unknown_key": 1,
        })
        assert config.straight_policy == StraightPolicy.CHO_DAI_DI
        assert config.opening_card == str_to_cards("3c")[0]
        assert config.opening_single_only is False

    def test_from_dict_bad_policy(self):
        with pytest.raises(ValueError):
            RuleConfig.from_dict({"straight_policy": "wraparound"})

    def test_to_dict_roundtrip(self):
        config = RuleConfig(straight_policy=StraightPolicy.NO_TWO, opening_single_only=False)
        assert RuleConfig.from_dict(config.to_dict()) == config

    def test_from_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"straight_policy": "no_two"}), encoding="utf-8")
        config = RuleConfig.from_json(path)
        assert config.straight_policy == StraightPolicy.NO_TWO
        assert config.opening_card == THREE_OF_DIAMONDS
