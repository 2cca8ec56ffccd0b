"""2D Game module - Office arena survival environment"""

from .arena_env import ArenaEnv, run_random_episode
from .config import ArenaConfig
from .controls import InputIntent
from .session import ArenaSession

__all__ = ['ArenaEnv', 'ArenaSession', 'ArenaConfig', 'InputIntent', 'run_random_episode']
