# config.py
from dataclasses import dataclass, replace
from typing import Optional, Literal

@dataclass(frozen=True, slots=True)
class AppConfig:
    # shared / global
    grid_size: int = 20
    seed: Optional[int] = None

    # agent
    learning_rate: float = 0.1

    # loop
    game_speed: float = 5.0              # ticks per second
    mode: Literal["ai", "manual"] = "ai"
    training: bool = False
    restart_delay: float = 0.5           # seconds before an automatic restart
    frame_rate: int = 60                 # scheduler heartbeat

    # rewards
    food_reward: float = 10.0
    step_reward: float = -0.1
    death_reward: float = -15.0

    # headless training
    episodes: int = 2000
    train_speed: float = 1000.0          # simulated ticks per second
    print_every: int = 100
    log_dir: Optional[str] = "runs/qsnake"

    # play window (input capture only)
    window_px: int = 400
    window_title: str = "qsnake"

    def with_(self, **kwargs) -> "AppConfig":
        """Convenience: clone with updated values"""
        return replace(self, **kwargs)
