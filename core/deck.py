"""
洗牌与发牌

随机源以参数形式注入 (numpy Generator)，固定种子即可复现牌局
"""
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .cards import Card, FULL_DECK


RngLike = Union[None, int, np.random.Generator]


def make_rng(seed: RngLike = None) -> np.random.Generator:
    """
    构造随机源

    Args:
        seed: None (系统熵)、整数种子或已有的 Generator

    Returns:
        numpy Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def shuffled_deck(rng: RngLike = None) -> List[Card]:
    """
    生成洗好的 52 张牌

    Args:
        rng: 随机源或种子

    Returns:
        打乱顺序的牌列表
    """
    generator = make_rng(rng)
    order = generator.permutation(len(FULL_DECK))
    return [FULL_DECK[int(i)] for i in order]


def deal(deck: Sequence[Card], num_players: int = 4) -> Tuple[Tuple[Card, ...], ...]:
    """
    轮流发牌

    从牌堆顶依次给每位玩家发一张，直到剩余牌数不足一轮为止。
    四人局恰好每人 13 张、无余牌。

    Args:
        deck: 洗好的牌
        num_players: 玩家数

    Returns:
        各玩家手牌 (已排序)
    """
    if num_players <= 0:
        raise ValueError(f"num_players must be positive, got {num_players}")

    pile = list(deck)
    hands: List[List[Card]] = [[] for _ in range(num_players)]
    while len(pile) >= num_players:
        for hand in hands:
            hand.append(pile.pop())

    return tuple(tuple(sorted(hand)) for hand in hands)


def find_opening_player(
    hands: Sequence[Sequence[Card]],
    opening_card: Card,
) -> Optional[int]:
    """
    找出持有开局牌的玩家

    Returns:
        玩家下标，没人持有时返回 None
    """
    for i, hand in enumerate(hands):
        if opening_card in hand:
            return i
    return None
