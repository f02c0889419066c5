from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass(frozen=True)
class QAgentConfig:
    """Hyperparameters and knobs for the tabular Q-learning agent."""
    gamma: float = 0.95
    epsilon_start: float = 0.3
    epsilon_min: float = 0.01
    epsilon_decay: float = 0.995         # geometric, applied after every decision
    stall_threshold: int = 300           # decisions without food before a boost
    epsilon_boost: float = 0.1
    epsilon_boost_cap: float = 0.3
    large_reward: float = 10.0           # rewards this big count as "ate food"
    init_noise: float = 0.1              # lazy Q rows start in [0, init_noise)
    init_food_bias: float = 0.05         # warm start towards the food, 0 disables
    closer_bonus: float = 0.1            # distance shaping on non-eating moves
    farther_penalty: float = -0.1
    distance_buckets: Tuple[int, ...] = (2, 5, 10)
    seed: Optional[int] = None
