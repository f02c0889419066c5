from .interfaces import (
    Controller,
    Direction,
    EpisodeStatus,
    Position,
    Snapshot,
    StatsRecord,
    StepOutcome,
)
from .grid_world import GridWorld
from .rewards import ClassicRewards, RewardAdapter
