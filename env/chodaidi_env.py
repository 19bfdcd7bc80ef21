"""
锄大D Gymnasium 环境

遵循标准 Gymnasium API，动作为 52 维选牌向量 (全零表示过牌)
"""
from typing import Dict, Any, Tuple, Optional, List, Union, Iterable
import logging
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from core.actions import Combination
from core.cards import Card, DECK_SIZE, array_to_cards, cards_to_array, cards_to_str
from core.config import RuleConfig
from core.errors import PlayError
from core.game import ChoDaiDiGame
from core.state import GameState, Phase, NUM_PLAYERS, PLAY_ORDER

from .observation import ObservationBuilder

logger = logging.getLogger(__name__)

ActionLike = Union[None, np.ndarray, Combination, Iterable[Card]]


class ChoDaiDiEnv(gym.Env):
    """
    锄大D Gymnasium 环境

    四个座位轮流行动，观测与奖励都以刚行动的玩家为视角

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "ChoDaiDi-v0",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        config: Optional[RuleConfig] = None,
        seed: Optional[int] = None,
        win_reward: float = 1.0,
        invalid_action_penalty: float = -1.0,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            config: 规则配置
            seed: 随机种子 (每次 reset 使用同一副牌)
            win_reward: 出完手牌的奖励
            invalid_action_penalty: 非法动作的奖励
        """
        super().__init__()

        self.render_mode = render_mode
        self.config = config or RuleConfig()
        self.win_reward = win_reward
        self.invalid_action_penalty = invalid_action_penalty
        self._seed = seed

        self._obs_builder = ObservationBuilder()
        self._game: Optional[ChoDaiDiGame] = None

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        self.action_space = spaces.MultiBinary(DECK_SIZE)

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "last_play": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "played_cards": spaces.Box(0, 1, shape=(NUM_PLAYERS, DECK_SIZE), dtype=np.float32),
            "cards_left": spaces.Box(0, 1, shape=(NUM_PLAYERS,), dtype=np.float32),
            "position": spaces.Box(0, 1, shape=(NUM_PLAYERS,), dtype=np.float32),
            "pass_count": spaces.Box(0, 1, shape=(1,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境

        Args:
            seed: 随机种子
            options: 额外选项

        Returns:
            (observation, info) 元组
        """
        super().reset(seed=seed)

        # 使用提供的种子或初始种子，都没有时沿用 gymnasium 的随机源
        if seed is not None:
            game_seed = seed
        elif self._seed is not None:
            game_seed = self._seed
        else:
            game_seed = self.np_random

        self._game = ChoDaiDiGame.new(seed=game_seed, config=self.config)

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: ActionLike,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 52 维选牌向量、Combination、牌列表，或 None (过牌)

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._game is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if self._game.is_finished:
            raise RuntimeError("Episode has terminated. Call reset() first.")

        player = self._game.current_player
        cards = self._decode_action(action)

        try:
            if cards:
                self._game.submit_play(player, cards)
            else:
                self._game.submit_pass(player)
        except PlayError as e:
            # 非法动作：给予惩罚并保持状态
            logger.debug(f"Invalid action from player {int(player)}: {e.code}")
            obs = self._build_observation(player)
            info = self._build_info()
            info["error"] = e.code
            info["error_message"] = str(e)
            return obs, self.invalid_action_penalty, False, False, info

        terminated = self._game.is_finished
        reward = self.win_reward if terminated and self._game.winner == player else 0.0

        obs = self._build_observation(player)
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, False, info

    def _decode_action(self, action: ActionLike) -> List[Card]:
        """解码动作为牌列表"""
        if action is None:
            return []
        if isinstance(action, Combination):
            return list(action.cards)
        if isinstance(action, np.ndarray):
            return array_to_cards(action)
        cards = list(action)
        if cards and not all(isinstance(c, Card) for c in cards):
            return array_to_cards(np.asarray(cards))
        return cards

    def _build_observation(self, perspective: Optional[int] = None) -> Dict[str, np.ndarray]:
        """构建观测"""
        return self._obs_builder.build(self._game.state, perspective).to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        state = self._game.state
        legal_plays = state.get_legal_plays()

        info = {
            "current_player": int(state.current_player),
            "phase": state.phase.value,
            "legal_actions": legal_plays,
            "legal_action_mask": self.build_legal_mask(legal_plays),
            "can_pass": state.can_pass(),
            "step_count": state.step_count,
        }

        if state.is_finished:
            info["winner"] = int(state.winner)

        return info

    @staticmethod
    def build_legal_mask(legal_plays: List[Combination]) -> np.ndarray:
        """
        构建合法动作矩阵

        Returns:
            (n, 52) 数组，每行是一个合法出牌的选牌向量
        """
        if not legal_plays:
            return np.zeros((0, DECK_SIZE), dtype=np.int8)
        return np.stack([cards_to_array(c.cards) for c in legal_plays]).astype(np.int8)

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        state = self._game.state
        lines = []
        lines.append("=" * 50)
        lines.append(f"Phase: {state.phase.value}")
        lines.append(f"Current Player: {int(state.current_player)}")

        for seat in PLAY_ORDER:
            hand = state.get_hand(seat)
            lines.append(f"{seat.name}: {cards_to_str(hand)} ({len(hand)})")

        lead = state.trick.lead
        if lead is not None:
            lines.append(f"Lead: {lead} by {state.trick.last_player.name}")
            lines.append(f"Passes: {state.trick.pass_count}")

        if state.phase == Phase.GAME_OVER:
            lines.append(f"Winner: {state.winner.name}")

        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        self._game = None

    @property
    def state(self) -> Optional[GameState]:
        """获取当前状态 (用于调试)"""
        return self._game.state if self._game is not None else None

    @property
    def game(self) -> Optional[ChoDaiDiGame]:
        return self._game

    def get_legal_actions(self) -> List[Combination]:
        """获取当前合法出牌 (不含过牌)"""
        if self._game is None:
            return []
        return self._game.state.get_legal_plays()

    def sample_action(self) -> np.ndarray:
        """随机采样一个合法动作 (无牌可出时为过牌)"""
        legal_actions = self.get_legal_actions()
        can_pass = self._game is not None and self._game.state.can_pass()

        n_choices = len(legal_actions) + (1 if can_pass else 0)
        if n_choices == 0:
            return np.zeros(DECK_SIZE, dtype=np.int8)

        idx = int(self.np_random.integers(n_choices))
        if idx == len(legal_actions):
            return np.zeros(DECK_SIZE, dtype=np.int8)
        return cards_to_array(legal_actions[idx].cards).astype(np.int8)


def make_env(
    env_id: str = "ChoDaiDi-v0",
    **kwargs
) -> ChoDaiDiEnv:
    """
    工厂函数：创建环境

    Args:
        env_id: 环境 ID
        **kwargs: 环境参数

    Returns:
        ChoDaiDiEnv 实例
    """
    if env_id != ChoDaiDiEnv.metadata["name"]:
        raise ValueError(f"Unknown env id: {env_id}")
    return ChoDaiDiEnv(**kwargs)
