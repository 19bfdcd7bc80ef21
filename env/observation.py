"""
观察空间编码

将游戏状态转换为定长的 numpy 特征
"""
from dataclasses import dataclass
from typing import Dict, Optional
import numpy as np

from core.cards import cards_to_array, DECK_SIZE
from core.state import GameState, NUM_PLAYERS, PLAY_ORDER


# 每人起手牌数
HAND_SIZE = DECK_SIZE // NUM_PLAYERS


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌 (52,)
        last_play: 桌面上的领出牌型 (52,)
        played_cards: 各玩家已出牌累计 (4, 52)
        cards_left: 各玩家剩余牌数 / 13 (4,)
        position: 视角玩家 one-hot (4,)
        pass_count: 连续过牌次数 / 3 (1,)
    """
    hand: np.ndarray
    last_play: np.ndarray
    played_cards: np.ndarray
    cards_left: np.ndarray
    position: np.ndarray
    pass_count: np.ndarray

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "last_play": self.last_play,
            "played_cards": self.played_cards,
            "cards_left": self.cards_left,
            "position": self.position,
            "pass_count": self.pass_count,
        }

    def to_flat_array(self) -> np.ndarray:
        """
        展平为单一向量

        特征维度: 52 + 52 + 4 * 52 + 4 + 4 + 1 = 321
        """
        return np.concatenate([
            self.hand,
            self.last_play,
            self.played_cards.flatten(),
            self.cards_left,
            self.position,
            self.pass_count,
        ])


class ObservationBuilder:
    """
    观测构建器

    负责将 GameState 转换为 Observation，只包含视角玩家可见的信息
    """

    def build(self, state: GameState, perspective: Optional[int] = None) -> Observation:
        """
        从游戏状态构建观测

        Args:
            state: 游戏状态
            perspective: 视角玩家 (默认为当前玩家)

        Returns:
            Observation 对象
        """
        if perspective is None:
            perspective = state.current_player

        hand = cards_to_array(state.get_hand(perspective))

        lead = state.trick.lead
        last_play = cards_to_array(lead.cards if lead is not None else ())

        played_cards = np.zeros((NUM_PLAYERS, DECK_SIZE), dtype=np.float32)
        for seat, cards in state.play_history:
            for card in cards:
                played_cards[seat, card.index] = 1

        cards_left = np.array(
            [len(state.get_hand(seat)) / HAND_SIZE for seat in PLAY_ORDER],
            dtype=np.float32,
        )

        position = np.zeros(NUM_PLAYERS, dtype=np.float32)
        position[perspective] = 1

        pass_count = np.array(
            [state.trick.pass_count / (NUM_PLAYERS - 1)], dtype=np.float32
        )

        return Observation(
            hand=hand,
            last_play=last_play,
            played_cards=played_cards,
            cards_left=cards_left,
            position=position,
            pass_count=pass_count,
        )
