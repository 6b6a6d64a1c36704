"""
Scripted play-through tests for the command-line round player.
"""

import sys
from pathlib import Path

from analysis.scoring import PROCESS_COMPLETION_POINTS, ROUND_COMPLETION_BONUS
from simulator import main, run_game
from utils.logger import EngineLogger
from utils.scenario_loader import load_game_config

SCENARIOS_DIR = Path(__file__).parent.parent / "scenarios"


def test_textbook_round_completes(tmp_path):
    config, actions = load_game_config(str(SCENARIOS_DIR / "textbook_round.json"))
    log_path = tmp_path / "round.log"
    logger = EngineLogger(log_file=str(log_path), echo=False)

    game = run_game(config, actions, session_id="t", logger=logger)
    logger.close()

    engine = game.store.get("t")
    assert engine.completed
    assert engine.score == 5 * PROCESS_COMPLETION_POINTS + ROUND_COMPLETION_BONUS
    assert len(engine.history_log.denied()) == 2
    assert len(engine.history_log.granted()) == 10

    text = log_path.read_text()
    assert "would violate safety" in text
    assert "exceeds available" in text
    assert "Round 2 Complete!" in text


def test_two_resource_round():
    config, actions = load_game_config(str(SCENARIOS_DIR / "two_resources.json"))

    game = run_game(config, actions)

    state = game.get_state("cli")
    assert state['available'] == [8, 4]
    assert not state['completed']


def test_bad_action_is_logged_and_skipped(two_resource_config, tmp_path):
    log_path = tmp_path / "bad.log"
    logger = EngineLogger(log_file=str(log_path), echo=False)
    actions = [
        {'type': 'request', 'process': 7, 'request': [1, 0]},
        {'type': 'request', 'process': 0, 'request': [1, 0]},
    ]

    game = run_game(two_resource_config, actions, logger=logger)
    logger.close()

    assert game.get_state("cli")['available'] == [9, 5]
    assert "[ERROR] Action 0 rejected" in log_path.read_text()


def test_main_exit_codes(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(sys, 'argv', ['simulator.py'])
    assert main() == 0
    assert "SAFE (P1 -> P3 -> P0 -> P2 -> P4)" in capsys.readouterr().out

    monkeypatch.setattr(sys, 'argv', ['simulator.py', '--scenario', str(tmp_path / "none.json")])
    assert main() == 1
    assert "Failed to load configuration" in capsys.readouterr().out
