"""
牌型定义与出牌生成器

锄大D共有 8 种牌型:
- 1 张: 单张
- 2 张: 对子
- 3 张: 三条
- 5 张: 顺子 < 同花 < 葫芦 < 四带一 < 同花顺
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Iterable
from collections import defaultdict
import itertools

from .cards import Card, Rank, cards_to_str
from .config import RuleConfig
from .errors import InvalidShape


class ComboType(IntEnum):
    """牌型类别 (五张牌型之间数值即大小顺序)"""
    SINGLE = 1            # 单张
    PAIR = 2              # 对子
    TRIPLE = 3            # 三条
    STRAIGHT = 4          # 顺子
    FLUSH = 5             # 同花
    FULL_HOUSE = 6        # 葫芦 (三带二)
    FOUR_PLUS_KICKER = 7  # 四带一 (金刚)
    STRAIGHT_FLUSH = 8    # 同花顺


# 牌型对应的张数
COMBO_ARITY: Dict[ComboType, int] = {
    ComboType.SINGLE: 1,
    ComboType.PAIR: 2,
    ComboType.TRIPLE: 3,
    ComboType.STRAIGHT: 5,
    ComboType.FLUSH: 5,
    ComboType.FULL_HOUSE: 5,
    ComboType.FOUR_PLUS_KICKER: 5,
    ComboType.STRAIGHT_FLUSH: 5,
}

# 合法的出牌张数
VALID_ARITIES: Tuple[int, ...] = (1, 2, 3, 5)

FIVE_CARD_TYPES: Tuple[ComboType, ...] = (
    ComboType.STRAIGHT,
    ComboType.FLUSH,
    ComboType.FULL_HOUSE,
    ComboType.FOUR_PLUS_KICKER,
    ComboType.STRAIGHT_FLUSH,
)


@dataclass(frozen=True, slots=True)
class Combination:
    """
    不可变牌型

    只应通过 RuleEngine.classify 构造，保证 combo_type 与 cards 一致

    Attributes:
        cards: 组成牌型的牌 (已排序)
        combo_type: 牌型类别
        deciding_card: 决定大小的牌 (葫芦/四带一取主体中最大的一张，其余取最大的一张)
    """
    cards: Tuple[Card, ...]
    combo_type: ComboType
    deciding_card: Card

    @classmethod
    def from_cards(cls, cards: Iterable[Card], config: Optional[RuleConfig] = None) -> 'Combination':
        """从牌列表识别牌型"""
        from .rules import RuleEngine
        return RuleEngine.classify(cards, config)

    @property
    def arity(self) -> int:
        return len(self.cards)

    @property
    def is_five_card(self) -> bool:
        return self.combo_type in FIVE_CARD_TYPES

    @property
    def key(self) -> Tuple[int, Card]:
        """比较键: (牌型类别, 决定牌)，只在同张数类别内有意义"""
        return (int(self.combo_type), self.deciding_card)

    def __contains__(self, card: Card) -> bool:
        return card in self.cards

    def __len__(self) -> int:
        return len(self.cards)

    def __str__(self) -> str:
        return f"{self.combo_type.name} [{cards_to_str(self.cards)}]"


class PlayGenerator:
    """
    合法出牌生成器

    根据手牌生成所有可能的牌型
    """

    def __init__(self, hand_cards: Iterable[Card], config: Optional[RuleConfig] = None):
        """
        Args:
            hand_cards: 手牌列表
            config: 规则配置 (影响顺子判定)
        """
        self.hand = sorted(hand_cards)
        self.config = config or RuleConfig()
        self.by_rank: defaultdict[Rank, List[Card]] = defaultdict(list)

        for card in self.hand:
            self.by_rank[card.rank].append(card)

    def _gen_same_rank(self, n: int) -> List[Combination]:
        """生成所有 n 张同点数的组合"""
        from .rules import RuleEngine

        result = []
        for rank in sorted(self.by_rank):
            for cards in itertools.combinations(self.by_rank[rank], n):
                result.append(RuleEngine.classify(cards, self.config))
        return result

    def gen_singles(self) -> List[Combination]:
        """生成所有单张"""
        return self._gen_same_rank(1)

    def gen_pairs(self) -> List[Combination]:
        """生成所有对子"""
        return self._gen_same_rank(2)

    def gen_triples(self) -> List[Combination]:
        """生成所有三条"""
        return self._gen_same_rank(3)

    def gen_five_card(self) -> List[Combination]:
        """生成所有五张牌型"""
        from .rules import RuleEngine

        result = []
        for cards in itertools.combinations(self.hand, 5):
            try:
                result.append(RuleEngine.classify(cards, self.config))
            except InvalidShape:
                continue
        return result

    def gen_arity(self, arity: int) -> List[Combination]:
        """生成指定张数的所有牌型"""
        if arity == 1:
            return self.gen_singles()
        if arity == 2:
            return self.gen_pairs()
        if arity == 3:
            return self.gen_triples()
        if arity == 5:
            return self.gen_five_card()
        return []

    def generate_all(self) -> List[Combination]:
        """
        生成所有可能的出牌 (主动出牌)

        Returns:
            所有合法牌型列表
        """
        actions = []
        for arity in VALID_ARITIES:
            actions.extend(self.gen_arity(arity))
        return actions

    def generate_openings(self) -> List[Combination]:
        """
        生成开局首手的合法出牌

        Returns:
            包含开局牌的牌型列表 (opening_single_only 时只有单张开局牌)
        """
        opening_card = self.config.opening_card
        if opening_card not in self.hand:
            return []

        if self.config.opening_single_only:
            return [c for c in self.gen_singles() if opening_card in c]

        return [c for c in self.generate_all() if opening_card in c]

    def generate_responses(self, lead: Combination) -> List[Combination]:
        """
        生成能压过领出牌型的所有出牌

        Args:
            lead: 当前领出的牌型

        Returns:
            所有合法跟牌列表 (不含过牌)
        """
        from .rules import RuleEngine

        return [
            combo for combo in self.gen_arity(lead.arity)
            if RuleEngine.compare(combo, lead) > 0
        ]
