"""
游戏状态定义

使用不可变数据结构，支持:
- 哈希 / 比较 (便于回放与测试)
- 失败的操作天然不产生副作用
- 易于序列化
"""
from dataclasses import dataclass, replace
from typing import Dict, Tuple, Optional, List, Iterable, Sequence
from enum import Enum, IntEnum
import logging

from .cards import Card
from .config import RuleConfig
from .deck import RngLike, shuffled_deck, deal, find_opening_player
from .actions import Combination, PlayGenerator
from .rules import RuleEngine

logger = logging.getLogger(__name__)


class Phase(Enum):
    """
    牌局阶段

    ROUND_COMPLETE 只作为事件出现：三家连续过牌后立即回到 AWAITING_LEAD
    """
    AWAITING_LEAD = "awaiting_lead"    # 无领出牌型，等待出牌
    TRICK_ACTIVE = "trick_active"      # 有领出牌型，可压或过
    ROUND_COMPLETE = "round_complete"  # 本轮结束
    GAME_OVER = "game_over"            # 有人出完手牌


class Seat(IntEnum):
    """座位 (按顺时针出牌)"""
    EAST = 0
    SOUTH = 1
    WEST = 2
    NORTH = 3


NUM_PLAYERS = 4

# 出牌顺序
PLAY_ORDER: Tuple[Seat, ...] = (Seat.EAST, Seat.SOUTH, Seat.WEST, Seat.NORTH)


@dataclass(frozen=True)
class Trick:
    """
    当前一轮的出牌记录

    Attributes:
        lead: 当前压在桌面上的牌型 (None 表示等待领出)
        last_player: 最后一个成功出牌的玩家
        pass_count: 自上次出牌以来连续过牌的次数
    """
    lead: Optional[Combination] = None
    last_player: Optional[Seat] = None
    pass_count: int = 0

    @property
    def arity(self) -> Optional[int]:
        """跟牌需要的张数"""
        return self.lead.arity if self.lead is not None else None


@dataclass(frozen=True)
class GameState:
    """
    不可变游戏状态

    Attributes:
        hands: 各座位手牌 (按 Seat 顺序，每手已排序)
        phase: 牌局阶段
        current_player: 当前行动玩家
        opening_player: 持有开局牌、必须首先出牌的玩家
        trick: 当前一轮
        config: 规则配置
        opened: 首手是否已经打出
        play_history: 出牌历史 ((seat, cards), ...)，过牌记为空元组
        trick_count: 已结束的轮数
        step_count: 当前步数
        winner: 赢家
    """
    hands: Tuple[Tuple[Card, ...], ...]
    phase: Phase
    current_player: Seat
    opening_player: Seat
    trick: Trick = Trick()
    config: RuleConfig = RuleConfig()
    opened: bool = False
    play_history: Tuple[Tuple[Seat, Tuple[Card, ...]], ...] = ()
    trick_count: int = 0
    step_count: int = 0
    winner: Optional[Seat] = None

    @classmethod
    def initial(cls, seed: RngLike = None, config: Optional[RuleConfig] = None) -> 'GameState':
        """
        创建初始游戏状态

        Args:
            seed: 随机种子或 numpy Generator
            config: 规则配置

        Returns:
            初始状态 (持有开局牌的玩家先出)
        """
        config = config or RuleConfig()
        hands = deal(shuffled_deck(seed), NUM_PLAYERS)
        return cls.from_hands(hands, config)

    @classmethod
    def from_hands(
        cls,
        hands: Sequence[Iterable[Card]],
        config: Optional[RuleConfig] = None,
        current_player: Optional[int] = None,
        opened: bool = False,
    ) -> 'GameState':
        """
        由指定手牌创建状态 (测试与残局复现用)

        Args:
            hands: 四家手牌
            config: 规则配置
            current_player: 当前行动玩家，默认为持有开局牌的玩家
            opened: 是否跳过首手限制

        Returns:
            AWAITING_LEAD 阶段的状态
        """
        config = config or RuleConfig()
        hands = tuple(tuple(sorted(hand)) for hand in hands)
        if len(hands) != NUM_PLAYERS:
            raise ValueError(f"Expected {NUM_PLAYERS} hands, got {len(hands)}")

        all_cards = [c for hand in hands for c in hand]
        if len(set(all_cards)) != len(all_cards):
            raise ValueError("A card appears in more than one place")

        holder = find_opening_player(hands, config.opening_card)
        if not opened and holder is None:
            raise ValueError(f"Nobody holds the opening card {config.opening_card}")

        opening_player = Seat(holder) if holder is not None else Seat(current_player or 0)
        if current_player is None:
            current_player = opening_player

        return cls(
            hands=hands,
            phase=Phase.AWAITING_LEAD,
            current_player=Seat(current_player),
            opening_player=opening_player,
            config=config,
            opened=opened,
        )

    def get_hand(self, player: int) -> Tuple[Card, ...]:
        """获取指定玩家的手牌"""
        return self.hands[player]

    @property
    def hand_sizes(self) -> Tuple[int, ...]:
        return tuple(len(hand) for hand in self.hands)

    @property
    def is_first_play(self) -> bool:
        """下一手是否是整局的第一手"""
        return not self.opened

    @property
    def is_finished(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def active_players(self) -> Tuple[Seat, ...]:
        """手中还有牌的玩家"""
        return tuple(seat for seat in PLAY_ORDER if self.hands[seat])

    @property
    def cards_played(self) -> Tuple[Card, ...]:
        """已打出的所有牌"""
        return tuple(c for _, cards in self.play_history for c in cards)

    @property
    def highest_card_in_play(self) -> Optional[Card]:
        """仍在玩家手中的最大的一张牌"""
        return RuleEngine.highest_card(self.hands)

    def next_active_player(self, player: int) -> Seat:
        """
        顺时针找下一个仍有手牌的玩家

        Args:
            player: 起点 (不含)
        """
        for offset in range(1, NUM_PLAYERS + 1):
            seat = PLAY_ORDER[(player + offset) % NUM_PLAYERS]
            if self.hands[seat]:
                return seat
        return Seat(player)

    def with_play(self, combo: Combination) -> 'GameState':
        """
        当前玩家出牌后的新状态

        调用前须已通过 RuleEngine.validate_play

        Args:
            combo: 已识别的牌型

        Returns:
            新状态
        """
        player = self.current_player

        # 更新手牌
        hands = list(self.hands)
        hands[player] = tuple(c for c in hands[player] if c not in combo.cards)
        new_hands = tuple(hands)

        new_trick = Trick(lead=combo, last_player=player, pass_count=0)
        new_history = self.play_history + ((player, combo.cards),)

        # 出完牌即结束
        if not new_hands[player]:
            logger.info(f"Player {int(player)} emptied their hand with {combo}")
            return replace(
                self,
                hands=new_hands,
                phase=Phase.GAME_OVER,
                trick=new_trick,
                opened=True,
                play_history=new_history,
                step_count=self.step_count + 1,
                winner=player,
            )

        next_state = replace(
            self,
            hands=new_hands,
            phase=Phase.TRICK_ACTIVE,
            trick=new_trick,
            opened=True,
            play_history=new_history,
            step_count=self.step_count + 1,
        )
        return replace(next_state, current_player=next_state.next_active_player(player))

    def with_pass(self) -> 'GameState':
        """
        当前玩家过牌后的新状态

        其余在局玩家全部过牌后本轮结束，由本轮最后出牌的玩家重新领出

        Returns:
            新状态
        """
        player = self.current_player
        pass_count = self.trick.pass_count + 1
        new_history = self.play_history + ((player, ()),)

        if pass_count >= len(self.active_players) - 1:
            trick_winner = self.trick.last_player
            if trick_winner is None or not self.hands[trick_winner]:
                trick_winner = self.next_active_player(player)
            logger.debug(f"Trick {self.trick_count + 1} won by player {int(trick_winner)}")
            return replace(
                self,
                phase=Phase.AWAITING_LEAD,
                current_player=trick_winner,
                trick=Trick(),
                play_history=new_history,
                trick_count=self.trick_count + 1,
                step_count=self.step_count + 1,
            )

        return replace(
            self,
            phase=Phase.TRICK_ACTIVE,
            current_player=self.next_active_player(player),
            trick=replace(self.trick, pass_count=pass_count),
            play_history=new_history,
            step_count=self.step_count + 1,
        )

    def with_action(self, action: Optional[Combination]) -> 'GameState':
        """
        执行动作后的新状态

        Args:
            action: 牌型，None 表示过牌
        """
        if self.is_finished:
            raise ValueError("Game is finished")
        if action is None:
            return self.with_pass()
        return self.with_play(action)

    def play(self, player: int, cards: Iterable[Card]) -> 'GameState':
        """
        校验并执行出牌

        Raises:
            PlayError: 出牌不合法 (状态不变)
        """
        combo = RuleEngine.validate_play(self, player, cards)
        return self.with_play(combo)

    def pass_turn(self, player: int) -> 'GameState':
        """
        校验并执行过牌

        Raises:
            PlayError: 过牌不合法 (状态不变)
        """
        RuleEngine.validate_pass(self, player)
        return self.with_pass()

    def get_legal_plays(self, player: Optional[int] = None) -> List[Combination]:
        """
        获取玩家当前可出的所有牌型 (不含过牌)

        Args:
            player: 玩家，默认为当前行动玩家；非当前玩家返回空列表
        """
        if player is None:
            player = self.current_player
        if self.is_finished or player != self.current_player:
            return []

        generator = PlayGenerator(self.get_hand(player), self.config)

        if self.is_first_play:
            return generator.generate_openings()
        if self.trick.lead is None:
            return generator.generate_all()
        return generator.generate_responses(self.trick.lead)

    def can_pass(self, player: Optional[int] = None) -> bool:
        """玩家当前是否可以过牌"""
        if player is None:
            player = self.current_player
        return (
            not self.is_finished
            and not self.is_first_play
            and player == self.current_player
            and self.trick.lead is not None
        )

    def get_hands_dict(self) -> Dict[Seat, List[Card]]:
        """获取手牌字典"""
        return {seat: list(self.hands[seat]) for seat in PLAY_ORDER}
