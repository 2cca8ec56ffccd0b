"""
Action-space wrapper for algorithms that only accept Discrete actions (DQN)
"""

import gymnasium as gym
import numpy as np
from gymnasium import spaces


class MultiDiscreteToDiscreteWrapper(gym.ActionWrapper):
    """
    Flattens MultiDiscrete([9, 2, 2, 2]) to Discrete(9*2*2*2=72).
    The last sub-action varies fastest.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete), \
            "MultiDiscreteToDiscreteWrapper needs a MultiDiscrete action space"
        self.orig_action_space = env.action_space
        self._nvec = [int(n) for n in env.action_space.nvec]
        self.n_total = int(np.prod(self._nvec))
        self.action_space = spaces.Discrete(self.n_total)

    def action(self, action) -> np.ndarray:
        """Decode a flat index into one index per sub-action"""
        indices = []
        remaining = int(action)
        for n in reversed(self._nvec):
            indices.append(remaining % n)
            remaining //= n
        return np.array(list(reversed(indices)), dtype=np.int64)
