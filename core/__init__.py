"""
Core Layer - 纯游戏逻辑

Modules:
    cards: 牌定义与编码
    deck: 洗牌与发牌
    errors: 异常定义
    config: 规则配置
    actions: 牌型与出牌生成
    rules: 规则引擎
    state: 游戏状态
    game: 游戏控制器
"""
from .cards import (
    Rank,
    Suit,
    Card,
    FULL_DECK,
    THREE_OF_DIAMONDS,
    TWO_OF_SPADES,
    parse_card,
    str_to_cards,
    cards_to_str,
    sort_by_rank,
    sort_by_suit,
    cards_to_array,
    array_to_cards,
)

from .deck import (
    make_rng,
    shuffled_deck,
    deal,
    find_opening_player,
)

from .errors import (
    ChoDaiDiError,
    CardParseError,
    IncomparableArity,
    PlayError,
    InvalidArity,
    InvalidShape,
    NotOwned,
    MustLeadOpeningCard,
    ArityMismatch,
    DoesNotBeat,
    CannotPassLeadingTrick,
    NotYourTurn,
    GameAlreadyOver,
)

from .config import StraightPolicy, RuleConfig

from .actions import (
    ComboType,
    Combination,
    PlayGenerator,
    VALID_ARITIES,
)

from .rules import RuleEngine

from .state import (
    Phase,
    Seat,
    Trick,
    GameState,
    PLAY_ORDER,
    NUM_PLAYERS,
)

from .game import (
    TurnOutcome,
    PlayerView,
    ChoDaiDiGame,
    start_game,
)

__all__ = [
    # cards
    "Rank",
    "Suit",
    "Card",
    "FULL_DECK",
    "THREE_OF_DIAMONDS",
    "TWO_OF_SPADES",
    "parse_card",
    "str_to_cards",
    "cards_to_str",
    "sort_by_rank",
    "sort_by_suit",
    "cards_to_array",
    "array_to_cards",
    # deck
    "make_rng",
    "shuffled_deck",
    "deal",
    "find_opening_player",
    # errors
    "ChoDaiDiError",
    "CardParseError",
    "IncomparableArity",
    "PlayError",
    "InvalidArity",
    "InvalidShape",
    "NotOwned",
    "MustLeadOpeningCard",
    "ArityMismatch",
    "DoesNotBeat",
    "CannotPassLeadingTrick",
    "NotYourTurn",
    "GameAlreadyOver",
    # config
    "StraightPolicy",
    "RuleConfig",
    # actions
    "ComboType",
    "Combination",
    "PlayGenerator",
    "VALID_ARITIES",
    # rules
    "RuleEngine",
    # state
    "Phase",
    "Seat",
    "Trick",
    "GameState",
    "PLAY_ORDER",
    "NUM_PLAYERS",
    # game
    "TurnOutcome",
    "PlayerView",
    "ChoDaiDiGame",
    "start_game",
]
