# tests/test_episode_loop.py
import pytest

from qsnake.core.interfaces import Direction, Position
from qsnake.runners.episode_loop import LoopHooks, LoopState, Mode


class Recorder:
    def __init__(self):
        self.stats, self.game_overs, self.episodes = [], [], []
    def hooks(self):
        return LoopHooks(
            on_stats=self.stats.append,
            on_game_over=self.game_overs.append,
            on_episode_end=lambda ep, s: self.episodes.append((ep, s)),
        )


def manual_loop(loop_factory, rec=None, **kw):
    kw.setdefault("game_speed", 4.0)
    return loop_factory(mode=Mode.MANUAL, hooks=rec.hooks() if rec else None, **kw)

def crash_into_right_wall(loop):
    loop.world.snake = [Position(19, 10)]
    loop.world.food = Position(0, 0)


def test_ticks_are_gated_by_game_speed(loop_factory):
    loop = manual_loop(loop_factory)
    assert loop.tick(0.0)
    assert loop.world.snake[0] == (11, 10)
    assert not loop.tick(0.1)
    assert not loop.tick(0.2)
    assert loop.world.snake[0] == (11, 10)
    assert loop.tick(0.25)
    assert loop.world.snake[0] == (12, 10)

def test_speed_change_applies_from_next_tick(loop_factory):
    loop = manual_loop(loop_factory)
    loop.tick(0.0)
    loop.set_game_speed(1.0)
    assert not loop.tick(0.5)
    assert loop.tick(1.0)

def test_invalid_speed(loop_factory):
    loop = manual_loop(loop_factory)
    with pytest.raises(ValueError):
        loop.set_game_speed(0)

def test_manual_intents_are_consumed_in_order(loop_factory):
    loop = manual_loop(loop_factory)
    assert loop.push_intent(Direction.DOWN)
    assert loop.push_intent(Direction.LEFT)
    loop.tick(0.0)
    assert loop.world.snake[0] == (10, 11)
    loop.tick(0.25)
    assert loop.world.snake[0] == (9, 11)
    loop.tick(0.5)                    # queue empty: keep heading left
    assert loop.world.snake[0] == (8, 11)

def test_reverse_intent_is_rejected(loop_factory):
    loop = manual_loop(loop_factory)
    assert not loop.push_intent(Direction.LEFT)
    loop.tick(0.0)
    assert loop.world.direction is Direction.RIGHT

def test_intents_ignored_in_ai_mode(loop_factory):
    loop = loop_factory(mode=Mode.AI)
    assert not loop.push_intent(Direction.UP)
    assert len(loop.manual) == 0

def test_eating_emits_stats(loop_factory):
    rec = Recorder()
    loop = manual_loop(loop_factory, rec)
    loop.world.food = Position(11, 10)
    loop.tick(0.0)
    st = rec.stats[-1]
    assert (st.score, st.high_score, st.games_played, st.average_score) == (1, 1, 0, 0.0)

def test_manual_game_over_waits_for_restart(loop_factory):
    rec = Recorder()
    loop = manual_loop(loop_factory, rec)
    crash_into_right_wall(loop)
    loop.tick(0.0)
    assert loop.state is LoopState.AWAITING_RESTART
    assert rec.game_overs[-1].auto_restart is False
    assert rec.game_overs[-1].reason == "wall"

    frozen = loop.world.snapshot()
    for i in range(1, 10):
        assert not loop.tick(i * 0.25)
    assert loop.world.snapshot() == frozen
    assert loop.state is LoopState.AWAITING_RESTART

    loop.request_restart()
    loop.tick(3.0)
    assert loop.state is LoopState.RUNNING
    assert loop.episode == 1
    assert any(st.score == 0 and st.games_played == 1 for st in rec.stats)

def test_ai_game_over_restarts_after_delay(loop_factory):
    rec = Recorder()
    # a 1x1 board: every move hits a wall
    loop = loop_factory(grid_size=1, mode=Mode.AI, game_speed=4.0, restart_delay=0.5, hooks=rec.hooks())
    loop.tick(0.0)
    assert loop.state is LoopState.GAME_OVER
    assert rec.game_overs[-1].auto_restart is True
    loop.tick(0.25)
    assert loop.state is LoopState.GAME_OVER
    assert loop.episode == 0
    loop.request_restart()            # no effect on an auto restart
    loop.tick(0.375)
    assert loop.episode == 0
    loop.tick(0.5)
    assert loop.episode == 1
    # the fresh episode stepped straight into a wall again
    assert loop.session.games_played == 2

def test_training_in_manual_mode_restarts_automatically(loop_factory):
    loop = manual_loop(loop_factory, training=True, restart_delay=0.0)
    crash_into_right_wall(loop)
    loop.tick(0.0)
    assert loop.state is LoopState.GAME_OVER
    loop.tick(0.25)
    assert loop.world.alive
    assert loop.episode == 1

def test_switching_to_ai_releases_a_waiting_game(loop_factory):
    loop = manual_loop(loop_factory)
    crash_into_right_wall(loop)
    loop.tick(0.0)
    assert loop.state is LoopState.AWAITING_RESTART
    loop.set_mode(Mode.AI)
    loop.tick(0.25)
    assert loop.episode == 1

def test_session_totals_and_average(loop_factory):
    rec = Recorder()
    loop = manual_loop(loop_factory, rec, restart_delay=0.0)
    assert loop.session.record().average_score == 0.0

    loop.world.food = Position(11, 10)
    loop.tick(0.0)                    # score 1
    loop.world.snake = [Position(19, 10), Position(18, 10)]
    loop.world.food = Position(0, 0)
    loop.tick(0.25)                   # crash
    loop.reset()
    crash_into_right_wall(loop)
    loop.tick(0.5)

    st = loop.session.record()
    assert st.games_played == 2
    assert st.high_score == 1
    assert st.average_score == 0.5
    assert [ep for ep, _ in rec.episodes] == [0, 1]
    assert rec.episodes[0][1]["final_score"] == 1
    assert rec.episodes[1][1]["death_reason"] == "wall"

def test_learning_only_when_training_in_ai_mode(loop_factory):
    idle = loop_factory(grid_size=8, mode=Mode.AI, training=False, restart_delay=0.0, game_speed=4.0)
    busy = loop_factory(grid_size=8, mode=Mode.AI, training=True, restart_delay=0.0, game_speed=4.0)
    for i in range(100):
        idle.tick(i * 0.25)
        busy.tick(i * 0.25)
    assert idle.agent.state.updates == 0
    assert busy.agent.state.updates > 0
    assert idle.agent.state.decisions > 0

def test_agent_survives_restarts(loop_factory):
    loop = loop_factory(grid_size=1, mode=Mode.AI, training=True, restart_delay=0.0, game_speed=4.0)
    agent = loop.agent
    for i in range(20):
        loop.tick(i * 0.25)
    assert loop.episode > 0
    assert loop.agent is agent
    assert len(agent.q) > 0

def test_toggle_mode(loop_factory):
    loop = loop_factory(mode=Mode.AI)
    assert loop.toggle_mode() is Mode.MANUAL
    assert loop.toggle_mode() is Mode.AI
