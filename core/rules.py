"""
规则引擎 - 牌型识别、大小比较、合法性校验

所有方法都是纯函数，无状态
"""
from typing import Iterable, List, Optional, Sequence, TYPE_CHECKING
from collections import Counter
import logging

from .cards import Card, Rank
from .actions import Combination, ComboType, COMBO_ARITY, VALID_ARITIES
from .config import RuleConfig, StraightPolicy
from .errors import (
    InvalidArity,
    InvalidShape,
    NotOwned,
    MustLeadOpeningCard,
    ArityMismatch,
    DoesNotBeat,
    CannotPassLeadingTrick,
    NotYourTurn,
    GameAlreadyOver,
    IncomparableArity,
    PlayError,
)

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)


# 港式规则下额外允许的特殊顺子
SPECIAL_STRAIGHTS = (
    frozenset({Rank.ACE, Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE}),
    frozenset({Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE, Rank.SIX}),
    frozenset({Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE, Rank.TWO}),
)


class RuleEngine:
    """
    锄大D规则引擎

    提供牌型识别、大小比较、出牌/过牌校验等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def is_consecutive(ranks: Sequence[int]) -> bool:
        """
        检查点数列表是否连续

        Args:
            ranks: 已排序的点数列表
        """
        for i in range(len(ranks) - 1):
            if ranks[i + 1] - ranks[i] != 1:
                return False
        return True

    @staticmethod
    def is_straight(cards: Sequence[Card], policy: StraightPolicy = StraightPolicy.NO_WRAP) -> bool:
        """
        检查五张牌的点数是否构成顺子 (不看花色)

        Args:
            cards: 五张牌
            policy: 顺子判定规则
        """
        ranks = sorted({c.rank for c in cards})
        if len(cards) != 5 or len(ranks) != 5:
            return False

        consecutive = RuleEngine.is_consecutive(ranks)

        if policy == StraightPolicy.NO_WRAP:
            return consecutive
        if policy == StraightPolicy.NO_TWO:
            return consecutive and Rank.TWO not in ranks
        # CHO_DAI_DI
        if consecutive and Rank.TWO not in ranks:
            return True
        return frozenset(ranks) in SPECIAL_STRAIGHTS

    @staticmethod
    def is_flush(cards: Sequence[Card]) -> bool:
        """检查五张牌是否同花色"""
        return len(cards) == 5 and len({c.suit for c in cards}) == 1

    @staticmethod
    def detect_combo_type(
        cards: Sequence[Card],
        policy: StraightPolicy = StraightPolicy.NO_WRAP,
    ) -> Optional[ComboType]:
        """
        识别牌型

        五张牌按 顺子 / 同花 / 葫芦 / 四带一 / 同花顺 的顺序判定，
        各条件互斥，最多命中一种

        Args:
            cards: 牌列表 (不含重复)
            policy: 顺子判定规则

        Returns:
            牌型类别，不成牌型返回 None
        """
        n = len(cards)
        counter = Counter(c.rank for c in cards)

        # 单张
        if n == 1:
            return ComboType.SINGLE

        # 对子
        if n == 2:
            return ComboType.PAIR if len(counter) == 1 else None

        # 三条
        if n == 3:
            return ComboType.TRIPLE if len(counter) == 1 else None

        if n != 5:
            return None

        straight = RuleEngine.is_straight(cards, policy)
        flush = RuleEngine.is_flush(cards)
        count_values = sorted(counter.values())

        if straight and not flush:
            return ComboType.STRAIGHT
        if flush and not straight:
            return ComboType.FLUSH
        if count_values == [2, 3]:
            return ComboType.FULL_HOUSE
        if count_values == [1, 4]:
            return ComboType.FOUR_PLUS_KICKER
        if straight and flush:
            return ComboType.STRAIGHT_FLUSH
        return None

    @staticmethod
    def get_deciding_card(cards: Sequence[Card], combo_type: ComboType) -> Card:
        """
        获取决定牌型大小的牌

        - 葫芦: 三张部分中最大的一张
        - 四带一: 四张部分中最大的一张
        - 其他: 最大的一张
        """
        if combo_type in (ComboType.FULL_HOUSE, ComboType.FOUR_PLUS_KICKER):
            group_size = 3 if combo_type == ComboType.FULL_HOUSE else 4
            counter = Counter(c.rank for c in cards)
            group_rank = next(r for r, n in counter.items() if n == group_size)
            return max(c for c in cards if c.rank == group_rank)
        return max(cards)

    @staticmethod
    def build(cards: Iterable[Card], combo_type: ComboType) -> Combination:
        """由已识别的牌型构造 Combination"""
        sorted_cards = tuple(sorted(cards))
        return Combination(
            cards=sorted_cards,
            combo_type=combo_type,
            deciding_card=RuleEngine.get_deciding_card(sorted_cards, combo_type),
        )

    @staticmethod
    def classify(cards: Iterable[Card], config: Optional[RuleConfig] = None) -> Combination:
        """
        将一组牌识别为牌型

        Args:
            cards: 玩家选出的牌
            config: 规则配置

        Returns:
            Combination

        Raises:
            InvalidArity: 张数不是 1/2/3/5
            InvalidShape: 张数正确但不成牌型，或包含重复的牌
        """
        config = config or RuleConfig()
        cards = list(cards)

        if len(cards) not in VALID_ARITIES:
            raise InvalidArity(
                f"plays must be a single, a pair, a triple or five cards, got {len(cards)} cards"
            )
        if len(set(cards)) != len(cards):
            raise InvalidShape("a play cannot contain the same card twice")

        combo_type = RuleEngine.detect_combo_type(cards, config.straight_policy)
        if combo_type is None:
            if len(cards) == 5:
                raise InvalidShape(
                    "5 card plays must be a straight, a flush, a full house, "
                    "four of a kind plus one, or a straight flush"
                )
            raise InvalidShape(f"{len(cards)} card plays may only contain cards of the same rank")

        return RuleEngine.build(cards, combo_type)

    @staticmethod
    def compare(a: Combination, b: Combination) -> int:
        """
        比较两个牌型的大小

        五张牌型之间先比牌型类别，再比决定牌 (点数后花色)；
        1/2/3 张只能与同张数比较

        Args:
            a: 牌型 a
            b: 牌型 b (通常是当前领出的牌型)

        Returns:
            1 if a > b, -1 if a < b, 0 if 相等

        Raises:
            IncomparableArity: 张数类别不同
        """
        if a.arity != b.arity or COMBO_ARITY[a.combo_type] != COMBO_ARITY[b.combo_type]:
            raise IncomparableArity(
                f"cannot compare a {a.combo_type.name} with a {b.combo_type.name}"
            )

        if a.key > b.key:
            return 1
        elif a.key < b.key:
            return -1
        return 0

    @staticmethod
    def beats(a: Combination, b: Combination) -> bool:
        """a 是否严格大于 b"""
        return RuleEngine.compare(a, b) > 0

    @staticmethod
    def validate_play(state: 'GameState', player: int, cards: Iterable[Card]) -> Combination:
        """
        校验出牌

        依次检查: 游戏是否结束 / 首手出牌人 / 是否轮到 / 持有 / 首手内容 /
        张数一致 / 牌型 / 是否压过。任何一步失败都不会修改状态。

        Args:
            state: 当前游戏状态
            player: 出牌玩家
            cards: 候选牌

        Returns:
            识别后的牌型

        Raises:
            PlayError 的各子类
        """
        cards = list(cards)
        config = state.config

        if state.is_finished:
            raise GameAlreadyOver("the game is already over")

        if state.is_first_play and player != state.opening_player:
            raise MustLeadOpeningCard(
                f"the player holding {config.opening_card} must make the first play"
            )

        if player != state.current_player:
            raise NotYourTurn(f"it is player {int(state.current_player)}'s turn")

        if not cards:
            raise InvalidArity("a play must contain at least one card")

        hand = state.get_hand(player)
        missing = [c for c in cards if c not in hand]
        if missing:
            raise NotOwned(f"{' '.join(str(c) for c in missing)} not in hand")

        if state.is_first_play:
            if config.opening_single_only and (len(cards) != 1 or cards[0] != config.opening_card):
                raise MustLeadOpeningCard(
                    f"the first play must be the {config.opening_card} on its own"
                )
            if config.opening_card not in cards:
                raise MustLeadOpeningCard(
                    f"the first play must contain the {config.opening_card}"
                )

        lead = state.trick.lead
        if lead is not None and len(cards) != lead.arity:
            raise ArityMismatch(
                f"during a trick all plays must contain {lead.arity} cards, got {len(cards)}"
            )

        combo = RuleEngine.classify(cards, config)

        if lead is not None and RuleEngine.compare(combo, lead) <= 0:
            raise DoesNotBeat(f"{combo} does not beat {lead}")

        return combo

    @staticmethod
    def validate_pass(state: 'GameState', player: int) -> None:
        """
        校验过牌

        Raises:
            GameAlreadyOver, MustLeadOpeningCard, NotYourTurn, CannotPassLeadingTrick
        """
        if state.is_finished:
            raise GameAlreadyOver("the game is already over")

        if state.is_first_play:
            raise MustLeadOpeningCard(
                f"the first play must contain the {state.config.opening_card}; passing is not allowed"
            )

        if player != state.current_player:
            raise NotYourTurn(f"it is player {int(state.current_player)}'s turn")

        if state.trick.lead is None:
            raise CannotPassLeadingTrick("cannot pass when leading a new trick")

    @staticmethod
    def is_valid_play(state: 'GameState', player: int, cards: Iterable[Card]) -> bool:
        """出牌是否合法 (不抛异常的版本)"""
        try:
            RuleEngine.validate_play(state, player, cards)
        except PlayError as e:
            logger.debug(f"Rejected play from player {player}: {e.code}: {e}")
            return False
        return True

    @staticmethod
    def can_beat(hand: Iterable[Card], lead: Combination, config: Optional[RuleConfig] = None) -> bool:
        """
        检查手牌是否能压过领出牌型

        Args:
            hand: 当前手牌
            lead: 领出的牌型
        """
        from .actions import PlayGenerator

        return bool(PlayGenerator(hand, config).generate_responses(lead))

    @staticmethod
    def get_winner(hands: Sequence[Sequence[Card]]) -> Optional[int]:
        """
        判断游戏是否结束及赢家

        Returns:
            手牌出完的玩家下标，未结束返回 None
        """
        for player, hand in enumerate(hands):
            if not hand:
                return player
        return None

    @staticmethod
    def highest_card(hands: Sequence[Sequence[Card]]) -> Optional[Card]:
        """所有手牌中最大的一张"""
        cards: List[Card] = [c for hand in hands for c in hand]
        return max(cards) if cards else None
