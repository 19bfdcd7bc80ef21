"""规则引擎测试"""
import itertools

import pytest
import numpy as np

from core.cards import FULL_DECK, Rank, str_to_cards
from core.actions import ComboType
from core.config import RuleConfig, StraightPolicy
from core.errors import (
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
)
from core.rules import RuleEngine
from core.state import GameState


def combo(s, config=None):
    return RuleEngine.classify(str_to_cards(s), config)


class TestDetectComboType:
    """牌型识别测试"""

    def test_single(self):
        assert combo("3d").combo_type == ComboType.SINGLE

    def test_pair(self):
        assert combo("9c 9s").combo_type == ComboType.PAIR

    def test_triple(self):
        assert combo("2c 2d 2h").combo_type == ComboType.TRIPLE

    def test_straight(self):
        assert combo("2c 3h 4d 5s 6s", RuleConfig(straight_policy=StraightPolicy.CHO_DAI_DI)).combo_type \
            == ComboType.STRAIGHT
        assert combo("9d 10c jh qs kd").combo_type == ComboType.STRAIGHT

    def test_flush(self):
        assert combo("3h 5h 9h jh kh").combo_type == ComboType.FLUSH

    def test_full_house(self):
        c = combo("3s 3d 3c 7s 7d")
        assert c.combo_type == ComboType.FULL_HOUSE
        assert c.deciding_card.rank == Rank.THREE

    def test_four_plus_kicker(self):
        c = combo("8d 8c 8h 8s 3d")
        assert c.combo_type == ComboType.FOUR_PLUS_KICKER
        assert c.deciding_card == str_to_cards("8s")[0]

    def test_straight_flush(self):
        assert combo("3s 4s 5s 6s 7s").combo_type == ComboType.STRAIGHT_FLUSH

    def test_wrong_pair(self):
        with pytest.raises(InvalidShape):
            combo("3d 4d")

    def test_wrong_triple(self):
        with pytest.raises(InvalidShape):
            combo("3d 3c 4d")

    def test_wrong_five(self):
        with pytest.raises(InvalidShape):
            combo("3d 3c 4d 4c 9s")

    @pytest.mark.parametrize("s", ["3d 4d 5d 6d", "3d 4d 5d 6d 7d 8d"])
    def test_wrong_arity(self, s):
        with pytest.raises(InvalidArity):
            combo(s)

    def test_empty(self):
        with pytest.raises(InvalidArity):
            RuleEngine.classify([])

    def test_duplicate_cards(self):
        with pytest.raises(InvalidShape):
            combo("3d 3d")

    def test_mutually_exclusive(self):
        """随机五张: 最多命中一种牌型，且与各判定条件一致"""
        rng = np.random.default_rng(0)
        for _ in range(2000):
            idx = rng.choice(52, size=5, replace=False)
            cards = [FULL_DECK[int(i)] for i in idx]
            combo_type = RuleEngine.detect_combo_type(cards)

            straight = RuleEngine.is_straight(cards)
            flush = RuleEngine.is_flush(cards)
            if straight and flush:
                assert combo_type == ComboType.STRAIGHT_FLUSH
            elif straight:
                assert combo_type == ComboType.STRAIGHT
            elif flush:
                assert combo_type == ComboType.FLUSH
            elif combo_type is not None:
                assert combo_type in (ComboType.FULL_HOUSE, ComboType.FOUR_PLUS_KICKER)


class TestStraightPolicy:
    """顺子规则测试"""

    def test_no_wrap(self):
        policy = StraightPolicy.NO_WRAP
        assert RuleEngine.is_straight(str_to_cards("10d jc qh kh as"), policy)
        assert RuleEngine.is_straight(str_to_cards("jd qc kh as 2s"), policy)
        assert not RuleEngine.is_straight(str_to_cards("ad 2c 3h 4h 5s"), policy)
        assert not RuleEngine.is_straight(str_to_cards("qd kc ah 2h 3s"), policy)

    def test_no_two(self):
        policy = StraightPolicy.NO_TWO
        assert RuleEngine.is_straight(str_to_cards("10d jc qh kh as"), policy)
        assert not RuleEngine.is_straight(str_to_cards("jd qc kh as 2s"), policy)
        assert not RuleEngine.is_straight(str_to_cards("ad 2c 3h 4h 5s"), policy)

    def test_cho_dai_di(self):
        policy = StraightPolicy.CHO_DAI_DI
        assert RuleEngine.is_straight(str_to_cards("3d 4c 5h 6h 7s"), policy)
        assert RuleEngine.is_straight(str_to_cards("ad 2c 3h 4h 5s"), policy)
        assert RuleEngine.is_straight(str_to_cards("2d 3c 4h 5h 6s"), policy)
        assert RuleEngine.is_straight(str_to_cards("jd qc kh as 2s"), policy)
        assert not RuleEngine.is_straight(str_to_cards("qd kc ah 2h 3s"), policy)

    def test_duplicate_ranks_never_straight(self):
        assert not RuleEngine.is_straight(str_to_cards("3d 3c 4h 5h 6s"))

    def test_classify_uses_config(self):
        cards = str_to_cards("jd qc kh as 2s")
        assert RuleEngine.classify(cards).combo_type == ComboType.STRAIGHT
        with pytest.raises(InvalidShape):
            RuleEngine.classify(cards, RuleConfig(straight_policy=StraightPolicy.NO_TWO))


class TestCompare:
    """牌型比较测试"""

    def test_singles_rank_then_suit(self):
        assert RuleEngine.compare(combo("2d"), combo("as")) == 1
        assert RuleEngine.compare(combo("ks"), combo("kh")) == 1
        assert RuleEngine.compare(combo("kh"), combo("ks")) == -1
        assert RuleEngine.compare(combo("kh"), combo("kh")) == 0

    def test_pairs_highest_card(self):
        # 同点数对子比最大的花色
        assert RuleEngine.beats(combo("9d 9s"), combo("9c 9h"))
        assert RuleEngine.beats(combo("10d 10c"), combo("9h 9s"))

    def test_triples(self):
        assert RuleEngine.beats(combo("4d 4c 4h"), combo("3c 3h 3s"))

    def test_category_dominates(self):
        flush = combo("3h 5h 9h jh kh")
        straight = combo("10d jc qh kh as")
        assert RuleEngine.beats(flush, straight)
        assert not RuleEngine.beats(straight, flush)

    def test_full_house_beats_any_straight(self):
        full_house = combo("3s 3d 3c 7s 7d")
        for s in ["3d 4c 5h 6h 7s", "10d jc qh kh as", "jd qc kh as 2s"]:
            assert RuleEngine.beats(full_house, combo(s))

    def test_five_card_order(self):
        ordered = [
            combo("jd qc kh as 2s"),       # 顺子
            combo("3h 5h 9h jh kh"),       # 同花
            combo("3s 3d 3c 7s 7d"),       # 葫芦
            combo("4d 4c 4h 4s 3h"),       # 四带一
            combo("3s 4s 5s 6s 7s"),       # 同花顺
        ]
        for lower, higher in itertools.combinations(ordered, 2):
            assert RuleEngine.compare(higher, lower) == 1
            assert RuleEngine.compare(lower, higher) == -1

    def test_full_house_by_triple(self):
        assert RuleEngine.beats(combo("4d 4c 4h 3s 3d"), combo("3h 3c 3s 2s 2d"))

    def test_four_by_quad(self):
        assert RuleEngine.beats(combo("5d 5c 5h 5s 3d"), combo("4d 4c 4h 4s 2s"))

    def test_straight_same_rank_suit_tiebreak(self):
        low = combo("3d 4c 5h 6h 7h")
        high = combo("3c 4c 5h 6h 7s")
        assert RuleEngine.beats(high, low)

    def test_flush_highest_card(self):
        assert RuleEngine.beats(combo("3d 5d 7d 9d 2d"), combo("4s 6s 8s 10s as"))

    def test_strict_order(self):
        """同张数内的比较是严格全序 (反对称)"""
        pairs = [combo(s) for s in ["3d 3c", "3h 3s", "9d 9h", "ad as", "2c 2s"]]
        for a, b in itertools.product(pairs, repeat=2):
            assert RuleEngine.compare(a, b) == -RuleEngine.compare(b, a)
            assert (RuleEngine.compare(a, b) == 0) == (a == b)

    @staticmethod
    def _sample_combos(arity, count, seed):
        """随机抽取若干个合法牌型"""
        rng = np.random.default_rng(seed)
        combos = set()
        for _ in range(20000):
            if len(combos) >= count:
                break
            idx = rng.choice(52, size=arity, replace=False)
            cards = [FULL_DECK[int(i)] for i in idx]
            if RuleEngine.detect_combo_type(cards) is not None:
                combos.add(RuleEngine.classify(cards))
        return sorted(combos, key=lambda c: c.key)

    @staticmethod
    def _assert_strict_total_order(combos):
        for a in combos:
            assert RuleEngine.compare(a, a) == 0
            assert not RuleEngine.beats(a, a)
        for a, b in itertools.product(combos, repeat=2):
            assert RuleEngine.compare(a, b) == -RuleEngine.compare(b, a)
        for a, b, c in itertools.permutations(combos, 3):
            if RuleEngine.beats(a, b) and RuleEngine.beats(b, c):
                assert RuleEngine.beats(a, c)

    def test_transitive_singles(self):
        singles = [combo(s) for s in ["3d", "3s", "9h", "kc", "ad", "2d", "2s"]]
        self._assert_strict_total_order(singles)

    def test_transitive_triples(self):
        triples = [combo(s) for s in ["3d 3c 3h", "3d 3c 3s", "7d 7h 7s", "ac ah as", "2d 2c 2h"]]
        self._assert_strict_total_order(triples)

    def test_transitive_five_card(self):
        """跨牌型的五张组合也满足传递性"""
        combos = self._sample_combos(5, 30, seed=11)
        combos += [
            combo("jd qc kh as 2s"),
            combo("3s 3d 3c 7s 7d"),
            combo("4d 4c 4h 4s 3h"),
            combo("3s 4s 5s 6s 7s"),
        ]
        combos = list(dict.fromkeys(combos))
        assert len({c.combo_type for c in combos}) >= 3
        self._assert_strict_total_order(combos)

    def test_incomparable_arity(self):
        with pytest.raises(IncomparableArity):
            RuleEngine.compare(combo("3d 3c"), combo("4d 4c 4h"))
        with pytest.raises(IncomparableArity):
            RuleEngine.compare(combo("2s"), combo("3d 4c 5h 6h 7s"))


# 测试用手牌: 玩家 0 持有 3♦
HANDS = [
    str_to_cards("3d 4d 5d 6d 7d 9c 9s"),
    str_to_cards("3c 3h 3s 8d 8c jd"),
    str_to_cards("4c 4h 4s 10d kd"),
    str_to_cards("as 2s 2h 5c 6c"),
]


def opened_state(**kwargs):
    return GameState.from_hands(HANDS, opened=True, current_player=0, **kwargs)


class TestValidatePlay:
    """出牌校验测试"""

    def test_first_play_wrong_player(self):
        state = GameState.from_hands(HANDS)
        with pytest.raises(MustLeadOpeningCard):
            RuleEngine.validate_play(state, 1, str_to_cards("3c"))

    def test_first_play_must_be_opening_single(self):
        state = GameState.from_hands(HANDS)
        with pytest.raises(MustLeadOpeningCard):
            RuleEngine.validate_play(state, 0, str_to_cards("4d"))
        with pytest.raises(MustLeadOpeningCard):
            RuleEngine.validate_play(state, 0, str_to_cards("3d 4d 5d 6d 7d"))
        result = RuleEngine.validate_play(state, 0, str_to_cards("3d"))
        assert result.combo_type == ComboType.SINGLE

    def test_first_play_containing_opening(self):
        state = GameState.from_hands(HANDS, RuleConfig(opening_single_only=False))
        result = RuleEngine.validate_play(state, 0, str_to_cards("3d 4d 5d 6d 7d"))
        assert result.combo_type == ComboType.STRAIGHT_FLUSH
        with pytest.raises(MustLeadOpeningCard):
            RuleEngine.validate_play(state, 0, str_to_cards("9c 9s"))

    def test_not_your_turn(self):
        state = opened_state()
        with pytest.raises(NotYourTurn):
            RuleEngine.validate_play(state, 1, str_to_cards("8d"))

    def test_not_owned(self):
        state = opened_state()
        with pytest.raises(NotOwned):
            RuleEngine.validate_play(state, 0, str_to_cards("2s"))

    def test_empty_play(self):
        with pytest.raises(InvalidArity):
            RuleEngine.validate_play(opened_state(), 0, [])

    def test_pair_against_triple(self):
        state = GameState.from_hands(HANDS, opened=True, current_player=1)
        state = state.play(1, str_to_cards("3c 3h 3s"))
        with pytest.raises(ArityMismatch):
            RuleEngine.validate_play(state, 2, str_to_cards("4c 4h"))

    def test_single_against_pair(self):
        state = opened_state().play(0, str_to_cards("9c 9s"))
        with pytest.raises(ArityMismatch):
            RuleEngine.validate_play(state, 1, str_to_cards("jd"))

    def test_does_not_beat(self):
        state = opened_state().play(0, str_to_cards("9s"))
        with pytest.raises(DoesNotBeat):
            RuleEngine.validate_play(state, 1, str_to_cards("8c"))
        assert RuleEngine.validate_play(state, 1, str_to_cards("jd")).deciding_card == str_to_cards("jd")[0]

    def test_game_already_over(self):
        hands = [str_to_cards("3d"), str_to_cards("4d"), str_to_cards("5d"), str_to_cards("6d")]
        state = GameState.from_hands(hands).play(0, str_to_cards("3d"))
        assert state.is_finished
        with pytest.raises(GameAlreadyOver):
            RuleEngine.validate_play(state, 1, str_to_cards("4d"))

    def test_is_valid_play(self):
        state = GameState.from_hands(HANDS)
        assert RuleEngine.is_valid_play(state, 0, str_to_cards("3d"))
        assert not RuleEngine.is_valid_play(state, 0, str_to_cards("4d"))


class TestValidatePass:
    """过牌校验测试"""

    def test_cannot_pass_first_play(self):
        state = GameState.from_hands(HANDS)
        with pytest.raises(MustLeadOpeningCard):
            RuleEngine.validate_pass(state, 0)

    def test_cannot_pass_when_leading(self):
        with pytest.raises(CannotPassLeadingTrick):
            RuleEngine.validate_pass(opened_state(), 0)

    def test_pass_not_your_turn(self):
        state = opened_state().play(0, str_to_cards("9s"))
        with pytest.raises(NotYourTurn):
            RuleEngine.validate_pass(state, 3)

    def test_pass_ok(self):
        state = opened_state().play(0, str_to_cards("9s"))
        RuleEngine.validate_pass(state, 1)


class TestHelpers:
    """辅助函数测试"""

    def test_can_beat(self):
        lead = combo("9s")
        assert RuleEngine.can_beat(str_to_cards("3d 10c"), lead)
        assert not RuleEngine.can_beat(str_to_cards("3d 9h"), lead)

    def test_get_winner(self):
        assert RuleEngine.get_winner([(), str_to_cards("3d"), (), ()]) == 0
        assert RuleEngine.get_winner([str_to_cards("3d"), str_to_cards("4d")]) is None

    def test_highest_card(self):
        assert RuleEngine.highest_card(HANDS) == str_to_cards("2s")[0]
        assert RuleEngine.highest_card([(), ()]) is None
