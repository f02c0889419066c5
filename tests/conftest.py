# tests/conftest.py
import os
import sys

# Headless SDL so tests don't open a window
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Ensure project root is importable (so qsnake.* imports work when running from repo root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pygame as pg
import pytest

@pytest.fixture(scope="session", autouse=True)
def _pygame_session():
    pg.init()
    yield
    pg.quit()

@pytest.fixture
def world_factory():
    from qsnake.core.grid_world import GridWorld
    def make(grid_size=20, seed=0, **kwargs):
        return GridWorld(grid_size, rng=np.random.default_rng(seed), **kwargs)
    return make

@pytest.fixture
def agent_factory():
    from qsnake.rl.agent_config import QAgentConfig
    from qsnake.rl.q_agent import QAgent
    def make(grid_size=20, lr=0.1, seed=0, **cfg_kwargs):
        return QAgent(grid_size, lr, QAgentConfig(**cfg_kwargs), rng=np.random.default_rng(seed))
    return make

@pytest.fixture
def loop_factory(world_factory, agent_factory):
    from qsnake.runners.episode_loop import EpisodeLoop
    def make(grid_size=20, seed=0, agent_kwargs=None, **loop_kwargs):
        world = world_factory(grid_size, seed)
        agent = agent_factory(grid_size, seed=seed + 1, **(agent_kwargs or {}))
        return EpisodeLoop(world, agent, **loop_kwargs)
    return make
