"""
游戏控制器

负责发牌、按顺序驱动状态机，并向外部 I/O 层提供动作接口:
- start_game(seed) -> ChoDaiDiGame
- submit_play(player, cards) -> TurnOutcome
- submit_pass(player) -> TurnOutcome
- query_state(player) -> PlayerView

失败的调用抛出 PlayError 子类，游戏状态保持不变
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

import numpy as np

from .cards import Card, cards_to_array, cards_to_str
from .config import RuleConfig
from .deck import RngLike
from .actions import Combination
from .errors import NotYourTurn, PlayError
from .rules import RuleEngine
from .state import GameState, Phase, Seat, PLAY_ORDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnOutcome:
    """
    一次成功动作的结果

    Attributes:
        player: 行动玩家
        combination: 打出的牌型 (过牌为 None)
        lead: 动作之后桌面上的领出牌型
        next_player: 下一个行动玩家 (游戏结束为 None)
        phase: 动作之后的阶段
        events: 本次动作经过的阶段，如 (ROUND_COMPLETE, AWAITING_LEAD)
        winner: 赢家
    """
    player: Seat
    combination: Optional[Combination]
    lead: Optional[Combination]
    next_player: Optional[Seat]
    phase: Phase
    events: Tuple[Phase, ...] = ()
    winner: Optional[Seat] = None

    @property
    def is_pass(self) -> bool:
        return self.combination is None

    @property
    def round_complete(self) -> bool:
        """本轮是否因其余玩家全部过牌而结束"""
        return Phase.ROUND_COMPLETE in self.events

    @property
    def game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER


@dataclass(frozen=True)
class PlayerView:
    """
    某个玩家可见的信息 (自己的手牌 + 公开的牌局信息)

    Attributes:
        player: 视角玩家
        hand: 自己的手牌
        hand_sizes: 各家剩余牌数
        current_player: 当前行动玩家
        phase: 牌局阶段
        lead: 桌面上的领出牌型
        last_player: 最后出牌的玩家
        pass_count: 连续过牌次数
        is_first_play: 下一手是否为首手
        opening_card: 开局牌
        opening_player: 持有开局牌的玩家
        winner: 赢家
        legal_plays: 轮到该玩家时可出的牌型
    """
    player: Seat
    hand: Tuple[Card, ...]
    hand_sizes: Tuple[int, ...]
    current_player: Seat
    phase: Phase
    lead: Optional[Combination]
    last_player: Optional[Seat]
    pass_count: int
    is_first_play: bool
    opening_card: Card
    opening_player: Seat
    winner: Optional[Seat] = None
    legal_plays: Tuple[Combination, ...] = field(default=(), compare=False)

    @property
    def is_my_turn(self) -> bool:
        return self.phase != Phase.GAME_OVER and self.player == self.current_player

    @property
    def hand_array(self) -> np.ndarray:
        """手牌的 52 维编码"""
        return cards_to_array(self.hand)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player": int(self.player),
            "hand": [c.token for c in self.hand],
            "hand_sizes": list(self.hand_sizes),
            "current_player": int(self.current_player),
            "phase": self.phase.value,
            "lead": [c.token for c in self.lead.cards] if self.lead else None,
            "lead_type": self.lead.combo_type.name if self.lead else None,
            "last_player": int(self.last_player) if self.last_player is not None else None,
            "pass_count": self.pass_count,
            "is_first_play": self.is_first_play,
            "opening_card": self.opening_card.token,
            "opening_player": int(self.opening_player),
            "winner": int(self.winner) if self.winner is not None else None,
        }


class ChoDaiDiGame:
    """
    单局锄大D

    同一时刻只处理一个动作；状态为不可变的 GameState，
    校验全部通过后才替换为新状态
    """

    def __init__(self, state: GameState):
        self._state = state
        self._history: List[TurnOutcome] = []

    @classmethod
    def new(cls, seed: RngLike = None, config: Optional[RuleConfig] = None) -> 'ChoDaiDiGame':
        """洗牌发牌并创建新局"""
        state = GameState.initial(seed=seed, config=config)
        logger.info(
            f"New game: player {int(state.opening_player)} holds "
            f"{state.config.opening_card} and leads"
        )
        return cls(state)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def history(self) -> Tuple[TurnOutcome, ...]:
        return tuple(self._history)

    @property
    def current_player(self) -> Seat:
        return self._state.current_player

    @property
    def opening_player(self) -> Seat:
        return self._state.opening_player

    @property
    def opening_card(self) -> Card:
        return self._state.config.opening_card

    @property
    def is_finished(self) -> bool:
        return self._state.is_finished

    @property
    def winner(self) -> Optional[Seat]:
        return self._state.winner

    def submit_play(self, player: int, cards: Iterable[Card]) -> TurnOutcome:
        """
        出牌

        Args:
            player: 出牌玩家
            cards: 已解析的牌

        Returns:
            TurnOutcome

        Raises:
            PlayError: 出牌不合法，状态不变
        """
        cards = list(cards)
        before = self._state
        try:
            combo = RuleEngine.validate_play(before, player, cards)
        except PlayError as e:
            logger.debug(f"Player {player} play [{cards_to_str(cards)}] rejected: {e.code}: {e}")
            raise

        after = before.with_play(combo)
        logger.debug(f"Player {player} plays {combo}")
        return self._commit(before, after, Seat(player), combo)

    def submit_pass(self, player: int) -> TurnOutcome:
        """
        过牌

        Raises:
            PlayError: 过牌不合法，状态不变
        """
        before = self._state
        try:
            RuleEngine.validate_pass(before, player)
        except PlayError as e:
            logger.debug(f"Player {player} pass rejected: {e.code}: {e}")
            raise

        after = before.with_pass()
        logger.debug(f"Player {player} passes")
        return self._commit(before, after, Seat(player), None)

    def query_state(self, player: int) -> PlayerView:
        """
        获取某个玩家视角的信息 (无副作用)

        Args:
            player: 视角玩家

        Raises:
            NotYourTurn: 没有这个座位
        """
        state = self._state
        if player not in PLAY_ORDER:
            raise NotYourTurn(f"player {player} is not seated at this table")
        seat = Seat(player)
        return PlayerView(
            player=seat,
            hand=state.get_hand(seat),
            hand_sizes=state.hand_sizes,
            current_player=state.current_player,
            phase=state.phase,
            lead=state.trick.lead,
            last_player=state.trick.last_player,
            pass_count=state.trick.pass_count,
            is_first_play=state.is_first_play,
            opening_card=state.config.opening_card,
            opening_player=state.opening_player,
            winner=state.winner,
            legal_plays=tuple(state.get_legal_plays(seat)),
        )

    def _commit(
        self,
        before: GameState,
        after: GameState,
        player: Seat,
        combo: Optional[Combination],
    ) -> TurnOutcome:
        """替换状态并生成 TurnOutcome"""
        self._state = after

        events: Tuple[Phase, ...]
        if after.phase == Phase.GAME_OVER:
            events = (Phase.GAME_OVER,)
            logger.info(f"Game over after {after.step_count} steps, winner: player {int(after.winner)}")
        elif before.trick.lead is not None and after.trick.lead is None:
            events = (Phase.ROUND_COMPLETE, Phase.AWAITING_LEAD)
            logger.info(f"Player {int(after.current_player)} wins the trick and leads")
        else:
            events = (after.phase,)

        outcome = TurnOutcome(
            player=player,
            combination=combo,
            lead=after.trick.lead,
            next_player=None if after.is_finished else after.current_player,
            phase=after.phase,
            events=events,
            winner=after.winner,
        )
        self._history.append(outcome)
        return outcome


def start_game(seed: RngLike = None, config: Optional[RuleConfig] = None) -> ChoDaiDiGame:
    """
    开始新局

    Args:
        seed: 随机种子 (固定种子可复现发牌)
        config: 规则配置

    Returns:
        ChoDaiDiGame，可通过 opening_player / opening_card 得知谁先出、必须出什么
    """
    return ChoDaiDiGame.new(seed=seed, config=config)
