"""
Custom callback for tracking arena metrics during training.
Records: kills, waves reached, score, damage taken, survival.
"""

import os
import csv
from typing import Dict, List, Any, Optional

import numpy as np
from stable_baselines3.common.callbacks import BaseCallback

CSV_HEADER = [
    "timestep", "episode", "reward", "length",
    "kills", "wave", "score", "damage", "survived",
]


def episode_row(timestep: int, episode: int, info: Dict[str, Any]) -> List[Any]:
    """One CSV row from a finished episode's info (Monitor adds info['episode'])"""
    ep_info = info["episode"]
    return [
        timestep,
        episode,
        ep_info["r"],
        ep_info["l"],
        info.get("enemies_killed", 0),
        info.get("wave", 1),
        info.get("score", 0),
        info.get("damage_taken", 0),
        1.0 if info.get("health", 0) > 0 else 0.0,
    ]


class MetricsCallback(BaseCallback):
    """
    Callback to track and log arena metrics per episode.
    Saves to CSV for easy plotting.
    """

    def __init__(
        self,
        log_dir: str,
        algo_name: str,
        verbose: int = 1,
    ):
        super().__init__(verbose)
        self.log_dir = log_dir
        self.algo_name = algo_name

        self.episode_rewards: List[float] = []
        self.episode_lengths: List[int] = []
        self.episode_kills: List[float] = []
        self.episode_waves: List[float] = []
        self.episode_scores: List[float] = []
        self.episode_damage: List[float] = []

        self.csv_path: Optional[str] = None
        self.csv_file = None
        self.csv_writer = None

    def _on_training_start(self) -> None:
        """Initialize CSV file for logging."""
        os.makedirs(self.log_dir, exist_ok=True)
        self.csv_path = os.path.join(self.log_dir, f"{self.algo_name}_metrics.csv")

        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow(CSV_HEADER)
        self.csv_file.flush()

        if self.verbose > 0:
            print(f"[MetricsCallback] Logging to {self.csv_path}")

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        for info, done in zip(infos, dones):
            if not (done and "episode" in info):
                continue

            row = episode_row(self.num_timesteps, len(self.episode_rewards) + 1, info)
            _, _, reward, length, kills, wave, score, damage, _ = row
            self.episode_rewards.append(reward)
            self.episode_lengths.append(length)
            self.episode_kills.append(kills)
            self.episode_waves.append(wave)
            self.episode_scores.append(score)
            self.episode_damage.append(damage)

            if self.csv_writer:
                self.csv_writer.writerow(row)
                self.csv_file.flush()

            if self.verbose > 0 and len(self.episode_rewards) % 10 == 0:
                avg_reward = sum(self.episode_rewards[-10:]) / 10
                print(f"[{self.algo_name}] Episode {len(self.episode_rewards)}, "
                      f"Timestep {self.num_timesteps}, "
                      f"Avg Reward (10 ep): {avg_reward:.2f}")

        return True

    def _on_training_end(self) -> None:
        if self.csv_file:
            self.csv_file.close()
            if self.verbose > 0:
                print(f"[MetricsCallback] Saved {len(self.episode_rewards)} episodes to {self.csv_path}")

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics."""
        if not self.episode_rewards:
            return {}

        return {
            "mean_reward": np.mean(self.episode_rewards),
            "std_reward": np.std(self.episode_rewards),
            "mean_length": np.mean(self.episode_lengths),
            "total_episodes": len(self.episode_rewards),
            "mean_kills": np.mean(self.episode_kills),
            "mean_wave": np.mean(self.episode_waves),
            "mean_score": np.mean(self.episode_scores),
            "mean_damage": np.mean(self.episode_damage),
        }


class TensorboardMetricsCallback(BaseCallback):
    """
    Logs arena metrics to TensorBoard at every episode end.
    """

    def __init__(self, verbose: int = 0):
        super().__init__(verbose)

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        for info, done in zip(infos, dones):
            if done and "episode" in info:
                ep = info["episode"]
                self.logger.record("custom/episode_reward", ep["r"])
                self.logger.record("custom/episode_length", ep["l"])
                for key in ("wave", "enemies_killed", "score", "health"):
                    if key in info:
                        self.logger.record(f"custom/{key}", info[key])

        return True
