# tests/test_metrics_logging.py
import csv

import pytest

from qsnake.rl.logging import ALL_KEYS, CSVLogger, MemoryLogger, make_episode_logger
from qsnake.rl.metrics import EMA, SessionStats, WindowedStat


def test_ema_starts_at_first_value():
    e = EMA(0.5)
    assert e.update(4.0) == 4.0
    assert e.update(0.0) == 2.0

def test_windowed_stat_keeps_last_values():
    w = WindowedStat(2)
    assert w.summary() == {"mean": 0.0, "min": 0.0, "max": 0.0}
    for x in (1, 5, 3):
        w.add(x)
    assert w.summary() == {"mean": 4.0, "min": 3.0, "max": 5.0}

def test_session_stats():
    s = SessionStats()
    assert s.record().average_score == 0.0
    s.record_food(3)
    s.end_episode(3)
    s.start_episode()
    s.end_episode(0)
    s.start_episode()
    s.end_episode(1)
    st = s.record()
    assert (st.score, st.high_score, st.games_played) == (1, 3, 3)
    assert st.average_score == pytest.approx(1.33)

def test_csv_logger_writes_header_once(tmp_path):
    path = tmp_path / "nested" / "logs.csv"
    lg = CSVLogger(str(path), fieldnames=["step", "a"])
    lg.log(1, {"a": 1.0, "unknown": 2})
    lg.close()
    lg = CSVLogger(str(path), fieldnames=["step", "a"])
    lg.log(2, {"a": 3.0})
    lg.close()
    lg.close()
    rows = list(csv.DictReader(path.open()))
    assert [r["step"] for r in rows] == ["1", "2"]
    assert "unknown" not in rows[0]

def test_episode_logger_flattens_episode_summary():
    mem = MemoryLogger()
    on_end = make_episode_logger(logger=mem, step_getter=lambda: 42)
    on_end(0, {"final_score": 2, "steps": 30, "reward": 5.5, "death_reason": "self",
               "epsilon": 0.2, "q_states": 17, "average_score": 2.0, "high_score": 2})
    on_end(1, {"final_score": 0, "death_reason": "wall"})
    first, second = mem.rows
    assert set(first) == set(ALL_KEYS)
    assert first["step"] == 42
    assert first["epis/death_self"] == 1.0 and first["epis/death_wall"] == 0.0
    assert second["epis/death_wall"] == 1.0
    assert second["epis/score_mean100"] == 1.0
