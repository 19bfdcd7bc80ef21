#!/usr/bin/env python3
"""
对战脚本 (同屏四人轮流)

Usage:
    python scripts/play.py
    python scripts/play.py --seed 42 --names Alice Bob Carol Dave
    python scripts/play.py --rules rules.json --log-level DEBUG

环境变量 DAI_DI_PLAYER_NAME 设置第一位玩家的名字
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.cards import Card, str_to_cards, sort_by_rank, sort_by_suit
from core.config import RuleConfig
from core.errors import CardParseError, PlayError
from core.game import ChoDaiDiGame, PlayerView, TurnOutcome, start_game
from core.state import NUM_PLAYERS

logger = logging.getLogger(__name__)

HELP_TEXT = """\
输入要出的牌，以空格分隔，例如: '2c 3h 4d 5s 6s'、'2C 2D 2H' 或 'jc'
  p / pass   过牌
  sort       切换按点数/按花色排列手牌
  hint       列出当前可出的牌型
  q / quit   退出游戏"""


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Cho Dai Di Play")

    parser.add_argument("--seed", type=int, default=None, help="Random seed for the deal")
    parser.add_argument("--rules", type=str, default=None, help="Rule config JSON file")
    parser.add_argument(
        "--names",
        type=str,
        nargs="*",
        default=None,
        help="Player names in seat order",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    return parser.parse_args(argv)


def player_names(names: Optional[List[str]]) -> List[str]:
    """确定四位玩家的名字"""
    first = os.environ.get("DAI_DI_PLAYER_NAME", "Player")
    result = [first] + [f"Player {i + 1}" for i in range(1, NUM_PLAYERS)]
    for i, name in enumerate((names or [])[:NUM_PLAYERS]):
        result[i] = name
    return result


def format_hand(hand: List[Card], by_suit: bool) -> str:
    """手牌转字符串"""
    cards = sort_by_suit(hand) if by_suit else sort_by_rank(hand)
    return ", ".join(str(c) for c in cards)


def print_view(view: PlayerView, names: List[str], by_suit: bool):
    """打印当前玩家可见的信息"""
    print()
    print("=" * 60)
    for seat, size in enumerate(view.hand_sizes):
        marker = "*" if seat == view.current_player else " "
        print(f"{marker} {names[seat]}: {size} 张")
    print("-" * 60)
    if view.lead is not None:
        print(f"上一手: {view.lead} ({names[view.last_player]})")
    elif view.is_first_play:
        print(f"首手必须打出 {view.opening_card}")
    else:
        print("自由出牌")
    print(f"{names[view.player]} 的手牌: {format_hand(list(view.hand), by_suit)}")


def describe(outcome: TurnOutcome, names: List[str]) -> str:
    """动作结果转字符串"""
    name = names[outcome.player]
    if outcome.is_pass:
        text = f"{name} 过牌"
    else:
        text = f"{name} 出牌: {outcome.combination}"
    if outcome.round_complete:
        text += f"\n其余玩家都过牌，{names[outcome.next_player]} 重新出牌"
    return text


def take_turn(game: ChoDaiDiGame, names: List[str], sort_state: dict) -> Optional[TurnOutcome]:
    """
    读取当前玩家的输入直到产生一个合法动作

    Returns:
        TurnOutcome，玩家退出时返回 None
    """
    player = game.current_player

    while True:
        view = game.query_state(player)
        print_view(view, names, sort_state["by_suit"])

        try:
            line = input("出牌: ").strip()
        except EOFError:
            return None

        command = line.lower()
        if command in ("q", "quit"):
            return None
        if command in ("", "help"):
            print(HELP_TEXT)
            continue
        if command == "sort":
            sort_state["by_suit"] = not sort_state["by_suit"]
            print("手牌按花色排列" if sort_state["by_suit"] else "手牌按点数排列")
            continue
        if command == "hint":
            if view.legal_plays:
                for combo in view.legal_plays[:20]:
                    print(f"  {combo}")
                if len(view.legal_plays) > 20:
                    print(f"  ... 还有 {len(view.legal_plays) - 20} 种")
            else:
                print("没有能出的牌，只能过牌")
            continue

        try:
            if command in ("p", "pass"):
                return game.submit_pass(player)
            return game.submit_play(player, str_to_cards(line))
        except CardParseError as e:
            print(f"无法识别输入: {e}")
        except PlayError as e:
            print(f"不能这样出 ({e.code}): {e}")


def play_game(args) -> int:
    """同屏对战"""
    config = RuleConfig.from_json(args.rules) if args.rules else RuleConfig()
    names = player_names(args.names)
    game = start_game(seed=args.seed, config=config)
    sort_state = {"by_suit": False}

    print("=" * 60)
    print("锄大D 四人局")
    print("=" * 60)
    print(f"{names[game.opening_player]} 持有 {game.opening_card}，首先出牌。输入 help 查看帮助。")

    while not game.is_finished:
        outcome = take_turn(game, names, sort_state)
        if outcome is None:
            print("退出游戏")
            return 0
        print(describe(outcome, names))

    print()
    print("=" * 60)
    print(f"游戏结束! 胜者: {names[game.winner]}")
    print(f"总步数: {game.state.step_count}")
    print("=" * 60)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    logger.info(f"Starting game with seed={args.seed}, rules={args.rules}")
    return play_game(args)


if __name__ == "__main__":
    sys.exit(main())
