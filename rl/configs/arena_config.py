"""
Training configuration for the office arena environment
Experiment configurations with multiple reward shaping settings
"""

# Environment parameters
ENV_CONFIG = {
    "max_steps": 3600,  # 60 seconds at 60 ticks/s
    "k_enemies": 5,
    "m_flyers": 3,
}

# Overrides forwarded to ArenaConfig.from_dict (empty = game defaults)
ARENA_OVERRIDES = {}

# ==============================================================================
# REWARD SHAPING CONFIGURATIONS
# ==============================================================================

# Reward Config 1: BASELINE (balanced)
REWARD_CONFIG_BASELINE = {
    "name": "baseline",
    "description": "Balanced reward shaping",
    "R_KILL": 1.0,         # Ground adversary eliminated
    "R_FLYING_KILL": 1.5,  # Flyer eliminated during a rush
    "R_PICKUP": 0.5,       # Health pickup collected
    "R_DAMAGE": 1.0,       # Penalty multiplier for damage / max health
    "R_EVENT": 3.0,        # Special event answered in time
    "R_WAVE": 0.5,         # New wave reached
    "R_SHOT": 0.01,        # Penalty for shooting (energy is finite)
    "R_TIME": 0.001,       # Small time penalty
    "R_DEATH": 5.0,        # Game over penalty
}

# Reward Config 2: SURVIVAL_FOCUS (stay alive, answer events)
REWARD_CONFIG_SURVIVAL = {
    "name": "survival",
    "description": "Prioritize survival - higher damage/death penalties, bigger event reward",
    "R_KILL": 0.5,
    "R_FLYING_KILL": 0.5,
    "R_PICKUP": 1.0,
    "R_DAMAGE": 3.0,
    "R_EVENT": 5.0,
    "R_WAVE": 1.0,
    "R_SHOT": 0.02,
    "R_TIME": 0.0005,
    "R_DEATH": 10.0,
}

# Reward Config 3: AGGRESSIVE (kills first)
REWARD_CONFIG_AGGRESSIVE = {
    "name": "aggressive",
    "description": "Prioritize combat - higher kill rewards, lower penalties",
    "R_KILL": 2.0,
    "R_FLYING_KILL": 3.0,
    "R_PICKUP": 0.5,
    "R_DAMAGE": 0.5,
    "R_EVENT": 2.0,
    "R_WAVE": 0.5,
    "R_SHOT": 0.005,
    "R_TIME": 0.002,
    "R_DEATH": 3.0,
}

REWARD_CONFIGS = {
    "baseline": REWARD_CONFIG_BASELINE,
    "survival": REWARD_CONFIG_SURVIVAL,
    "aggressive": REWARD_CONFIG_AGGRESSIVE,
}


def reward_weights(name: str) -> dict:
    """Reward weights without the descriptive keys"""
    return {k: v for k, v in REWARD_CONFIGS[name].items() if k.startswith("R_")}


# ==============================================================================
# ALGORITHM HYPERPARAMETERS
# ==============================================================================

# PPO hyperparameters
PPO_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 3e-4,
    "n_steps": 1024,
    "batch_size": 256,
    "n_epochs": 10,
    "gamma": 0.99,
    "gae_lambda": 0.95,
    "clip_range": 0.2,
    "ent_coef": 0.01,
    "vf_coef": 0.5,
    "max_grad_norm": 0.5,
    "verbose": 1,
}

# DQN hyperparameters (needs the flattened Discrete action space)
DQN_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 1e-4,
    "buffer_size": 100_000,
    "learning_starts": 1000,
    "batch_size": 128,
    "tau": 1.0,
    "gamma": 0.99,
    "train_freq": 4,
    "gradient_steps": 1,
    "target_update_interval": 1000,
    "exploration_fraction": 0.1,
    "exploration_initial_eps": 1.0,
    "exploration_final_eps": 0.05,
    "verbose": 1,
}

# ==============================================================================
# TRAINING SETTINGS
# ==============================================================================

TRAINING_CONFIG = {
    "total_timesteps": 500_000,
    "n_envs": 4,
    "save_freq": 10_000,
    "eval_freq": 5_000,
    "log_dir": "./logs",
    "model_dir": "./models",
    "tensorboard_log": "./tensorboard_logs",
}
