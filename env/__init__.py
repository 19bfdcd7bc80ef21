"""
Environment Layer - Gymnasium 兼容环境

Modules:
    chodaidi_env: 主环境类
    observation: 观测空间构建
"""
from .chodaidi_env import (
    ChoDaiDiEnv,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
)

__all__ = [
    # env
    "ChoDaiDiEnv",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
]
