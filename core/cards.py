"""
牌的定义与编码

锄大D (Big Two) 使用一副 52 张标准扑克：
- 点数顺序: 3 < 4 < ... < K < A < 2
- 花色顺序: 方块 < 梅花 < 红桃 < 黑桃 (仅用于同点数比较)
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple, Dict, Iterable
import re
import numpy as np

from .errors import CardParseError


class Rank(IntEnum):
    """点数定义 (数值即大小顺序，3 最小，2 最大)"""
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14
    TWO = 15


class Suit(IntEnum):
    """花色定义 (数值即大小顺序)"""
    DIAMONDS = 0
    CLUBS = 1
    HEARTS = 2
    SPADES = 3


# 点数到显示字符的映射
RANK_TO_STR: Dict[Rank, str] = {
    Rank.THREE: '3', Rank.FOUR: '4', Rank.FIVE: '5', Rank.SIX: '6',
    Rank.SEVEN: '7', Rank.EIGHT: '8', Rank.NINE: '9', Rank.TEN: '10',
    Rank.JACK: 'J', Rank.QUEEN: 'Q', Rank.KING: 'K', Rank.ACE: 'A',
    Rank.TWO: '2',
}

# 花色到显示符号的映射
SUIT_TO_STR: Dict[Suit, str] = {
    Suit.DIAMONDS: '♦',
    Suit.CLUBS: '♣',
    Suit.HEARTS: '♥',
    Suit.SPADES: '♠',
}

# 花色到输入字母的映射
SUIT_TO_LETTER: Dict[Suit, str] = {
    Suit.DIAMONDS: 'd',
    Suit.CLUBS: 'c',
    Suit.HEARTS: 'h',
    Suit.SPADES: 's',
}

# 输入记号到点数的映射 (小写)
STR_TO_RANK: Dict[str, Rank] = {
    '3': Rank.THREE, 'three': Rank.THREE,
    '4': Rank.FOUR, 'four': Rank.FOUR,
    '5': Rank.FIVE, 'five': Rank.FIVE,
    '6': Rank.SIX, 'six': Rank.SIX,
    '7': Rank.SEVEN, 'seven': Rank.SEVEN,
    '8': Rank.EIGHT, 'eight': Rank.EIGHT,
    '9': Rank.NINE, 'nine': Rank.NINE,
    '10': Rank.TEN, 't': Rank.TEN, 'ten': Rank.TEN,
    '11': Rank.JACK, 'j': Rank.JACK, 'jack': Rank.JACK,
    '12': Rank.QUEEN, 'q': Rank.QUEEN, 'queen': Rank.QUEEN,
    '13': Rank.KING, 'k': Rank.KING, 'king': Rank.KING,
    '1': Rank.ACE, 'a': Rank.ACE, 'ace': Rank.ACE,
    '2': Rank.TWO, 'two': Rank.TWO, 'deuce': Rank.TWO,
}

# 输入记号到花色的映射 (小写)
STR_TO_SUIT: Dict[str, Suit] = {
    'd': Suit.DIAMONDS, 'diamonds': Suit.DIAMONDS, '♦': Suit.DIAMONDS, '♢': Suit.DIAMONDS,
    'c': Suit.CLUBS, 'clubs': Suit.CLUBS, '♣': Suit.CLUBS, '♧': Suit.CLUBS,
    'h': Suit.HEARTS, 'hearts': Suit.HEARTS, '♥': Suit.HEARTS, '♡': Suit.HEARTS,
    's': Suit.SPADES, 'spades': Suit.SPADES, '♠': Suit.SPADES, '♤': Suit.SPADES,
}

NUM_RANKS = len(Rank)
NUM_SUITS = len(Suit)
DECK_SIZE = NUM_RANKS * NUM_SUITS


@dataclass(frozen=True, order=True, slots=True)
class Card:
    """
    不可变的牌

    排序先比点数，再比花色 (字段声明顺序即比较顺序)

    Attributes:
        rank: 点数
        suit: 花色
    """
    rank: Rank
    suit: Suit

    @property
    def index(self) -> int:
        """在 52 维编码中的位置: 3♦=0, 3♣=1, ..., 2♠=51"""
        return (self.rank - Rank.THREE) * NUM_SUITS + self.suit

    @classmethod
    def from_index(cls, index: int) -> 'Card':
        """由 52 维编码位置还原牌"""
        if not 0 <= index < DECK_SIZE:
            raise ValueError(f"Card index out of range: {index}")
        rank, suit = divmod(index, NUM_SUITS)
        return cls(Rank(rank + Rank.THREE), Suit(suit))

    @property
    def token(self) -> str:
        """输入记号形式，如 "3d", "10h", "as" (parse_card 的逆)"""
        return f"{RANK_TO_STR[self.rank].lower()}{SUIT_TO_LETTER[self.suit]}"

    def __str__(self) -> str:
        return f"{RANK_TO_STR[self.rank]}{SUIT_TO_STR[self.suit]}"

    def __repr__(self) -> str:
        return f"Card({self})"


# 完整牌组 (52 张，按大小排列)
FULL_DECK: Tuple[Card, ...] = tuple(
    Card(rank, suit) for rank in Rank for suit in Suit
)

# 开局必须打出的牌
THREE_OF_DIAMONDS = Card(Rank.THREE, Suit.DIAMONDS)

# 全场最大的牌
TWO_OF_SPADES = Card(Rank.TWO, Suit.SPADES)


def parse_card(token: str) -> Card:
    """
    解析单张牌记号

    记号为 点数+花色，大小写不敏感，如 "2c", "10h", "TH", "jc", "A♠"

    Args:
        token: 牌记号

    Returns:
        Card 对象

    Raises:
        CardParseError: 记号无法识别
    """
    s = token.strip().lower()
    if len(s) < 2:
        raise CardParseError(f"`{token}` is not a valid card")

    # 花色可能是单字符或英文单词
    for suit_str in sorted(STR_TO_SUIT, key=len, reverse=True):
        if s.endswith(suit_str) and len(s) > len(suit_str):
            rank_str = s[:-len(suit_str)]
            if rank_str in STR_TO_RANK:
                return Card(STR_TO_RANK[rank_str], STR_TO_SUIT[suit_str])

    rank_str, suit_str = s[:-1], s[-1]
    if suit_str not in STR_TO_SUIT:
        raise CardParseError(f"`{suit_str}` is not a suit")
    raise CardParseError(f"`{rank_str}` is not a rank")


def str_to_cards(s: str) -> List[Card]:
    """
    将字符串转换为牌列表

    Args:
        s: 以空白或逗号分隔的牌记号，如 "3d 3h, 3s"

    Returns:
        牌列表 (保持输入顺序)
    """
    return [parse_card(token) for token in re.split(r'[\s,]+', s.strip()) if token]


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "3♦ 4♣ 5♥"
    """
    return ' '.join(str(c) for c in sorted(cards))


def sort_by_rank(cards: Iterable[Card]) -> List[Card]:
    """按点数排序 (同点数按花色)"""
    return sorted(cards)


def sort_by_suit(cards: Iterable[Card]) -> List[Card]:
    """按花色排序 (同花色按点数)"""
    return sorted(cards, key=lambda c: (c.suit, c.rank))


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 52 维 one-hot 向量

    位置由 Card.index 决定，因此向量下标顺序与牌的大小顺序一致

    Args:
        cards: 牌列表

    Returns:
        52 维 numpy 数组
    """
    array = np.zeros(DECK_SIZE, dtype=np.float32)
    for card in cards:
        array[card.index] = 1
    return array


def array_to_cards(array: np.ndarray) -> List[Card]:
    """
    将 52 维数组转换回牌列表

    Args:
        array: 52 维数组，非零位置表示持有该牌

    Returns:
        牌列表 (已排序)
    """
    array = np.asarray(array).reshape(-1)
    if array.shape[0] != DECK_SIZE:
        raise ValueError(f"Expected {DECK_SIZE} entries, got {array.shape[0]}")
    return [Card.from_index(int(i)) for i in np.flatnonzero(array)]
