"""
Allocation engine tests.

Covers request/release/check/reset, history and scoring, and the
invariants that must hold after every operation.
"""

import random

import numpy as np
import pytest

from algorithms.allocation import AllocationEngine
from algorithms.safety import check_state
from analysis.history import ActionKind
from analysis.scoring import PROCESS_COMPLETION_POINTS, ROUND_COMPLETION_BONUS, ScoreKeeper
from models.errors import ConfigurationError, InvalidProcess, InvalidResourceVector
from utils.logger import EngineLogger


def assert_invariants(engine):
    state = engine.state
    state.assert_resource_conservation("in test")
    total = state.total_vector
    assert np.array_equal(state.available_vector + state.allocation_matrix.sum(axis=0), total)
    assert np.all(state.max_demand_matrix - state.allocation_matrix >= 0)
    assert check_state(state).safe


def state_bytes(engine):
    return engine.state.available_vector.tobytes(), engine.state.allocation_matrix.tobytes()


def test_initialize_from_vectors():
    engine = AllocationEngine.initialize(
        ["A", "B"], [10, 5], ["P0", "P1"], [[7, 5], [3, 2]]
    )

    assert list(engine.state.available_vector) == [10, 5]
    assert engine.score == 0
    assert not engine.completed
    assert engine.history == ()


def test_initialize_rejects_bad_configuration():
    with pytest.raises(ConfigurationError):
        AllocationEngine.initialize(["A"], [3], ["P0", "P1"], [[2], [2]], [[2], [2]])


def test_scenario_a_grant_then_safe(two_resource_config):
    engine = AllocationEngine(two_resource_config)

    result = engine.request_resources(0, [2, 1])

    assert result.granted
    assert result.safety_check.safe
    assert list(engine.state.available_vector) == [8, 4]

    safety = engine.check_safety()
    assert safety.safe
    assert sorted(safety.sequence) == [0, 1]
    assert_invariants(engine)


def test_scenario_b_exceeds_available():
    engine = AllocationEngine.initialize(
        ["A", "B"], [7, 5], ["P0", "P1"], [[7, 5], [3, 2]], [[6, 5], [0, 0]]
    )
    assert list(engine.state.available_vector) == [1, 0]
    before = state_bytes(engine)

    result = engine.request_resources(1, [3, 0])

    assert not result.granted
    assert "exceeds available" in result.reason
    assert state_bytes(engine) == before
    assert engine.history[-1].granted is False


def test_scenario_c_blocked_before_safety_check():
    engine = AllocationEngine.initialize(["R"], [3], ["P0", "P1"], [[2], [2]], [[2], [1]])
    assert list(engine.state.available_vector) == [0]

    result = engine.request_resources(1, [1])

    assert not result.granted
    assert "exceeds available" in result.reason
    assert list(engine.state.available_vector) == [0]


def test_scenario_d_release_after_completion(two_resource_config):
    engine = AllocationEngine(two_resource_config)

    result = engine.request_resources(1, [3, 2])
    assert result.granted
    assert "P1 completed" in result.reason
    assert engine.score == PROCESS_COMPLETION_POINTS

    released = engine.release_resources(1)

    assert released == [3, 2]
    assert list(engine.state.available_vector) == [10, 5]
    assert engine.score == PROCESS_COMPLETION_POINTS
    assert not engine.completed
    assert_invariants(engine)


def test_scenario_e_completion_bonus_once(two_resource_config):
    engine = AllocationEngine(two_resource_config)

    engine.request_resources(1, [3, 2])
    engine.release_resources(1)
    result = engine.request_resources(0, [7, 5])

    expected = 2 * PROCESS_COMPLETION_POINTS + ROUND_COMPLETION_BONUS
    assert result.granted
    assert engine.completed
    assert engine.score == expected

    # nothing left to ask for once a process has finished
    again = engine.request_resources(0, [1, 0])
    assert not again.granted
    assert "already finished" in again.reason
    engine.release_resources(0)
    assert engine.completed
    assert engine.score == expected
    assert_invariants(engine)


def test_unsafe_request_is_rolled_back(textbook_config):
    engine = AllocationEngine(textbook_config)

    assert engine.request_resources(1, [1, 0, 2]).granted
    assert list(engine.state.available_vector) == [2, 3, 0]
    before = state_bytes(engine)

    result = engine.request_resources(0, [0, 2, 0])

    assert not result.granted
    assert "would violate safety" in result.reason
    assert not result.safety_check.safe
    assert state_bytes(engine) == before
    assert engine.check_safety().safe
    entry = engine.history[-1]
    assert entry.action == ActionKind.REQUEST
    assert entry.request == (0, 2, 0)
    assert not entry.granted


def test_exceeds_need_checked_before_available(textbook_config):
    engine = AllocationEngine(textbook_config)

    # P3 need = [0, 1, 1]; [3, 3, 3] exceeds both need and available
    result = engine.request_resources(3, [3, 3, 3])

    assert not result.granted
    assert result.reason.startswith("Request exceeds need")


def test_empty_request_denied(textbook_config):
    engine = AllocationEngine(textbook_config)

    result = engine.request_resources(0, [0, 0, 0])

    assert not result.granted
    assert "at least one" in result.reason
    assert len(engine.history) == 1


def test_structural_errors_raise_without_history(textbook_config):
    engine = AllocationEngine(textbook_config)
    before = state_bytes(engine)

    with pytest.raises(InvalidProcess):
        engine.request_resources(5, [1, 0, 0])
    with pytest.raises(InvalidProcess):
        engine.request_resources(True, [1, 0, 0])
    with pytest.raises(InvalidProcess):
        engine.release_resources(-1)
    with pytest.raises(InvalidResourceVector):
        engine.request_resources(0, [1, 0])
    with pytest.raises(InvalidResourceVector):
        engine.request_resources(0, [1, -1, 0])
    with pytest.raises(InvalidResourceVector):
        engine.request_resources(0, 1)
    with pytest.raises(InvalidResourceVector):
        engine.request_resources(0, [10**30, 0, 0])

    assert state_bytes(engine) == before
    assert engine.history == ()


def test_granted_entry_records_sequence(textbook_config):
    engine = AllocationEngine(textbook_config)

    result = engine.request_resources(1, [1, 0, 2])

    entry = engine.history[0]
    assert entry.granted
    assert entry.sequence == tuple(result.safety_check.sequence)
    assert entry.process_name == "P1"
    assert entry.to_dict()['request'] == [1, 0, 2]


def test_release_records_history(textbook_config):
    engine = AllocationEngine(textbook_config)

    released = engine.release_resources(2)

    assert released == [3, 0, 2]
    assert list(engine.state.available_vector) == [6, 3, 4]
    entry = engine.history[-1]
    assert entry.action == ActionKind.RELEASE
    assert entry.granted
    assert entry.request == (3, 0, 2)

    assert engine.release_resources(2) == [0, 0, 0]
    assert "held no resources" in engine.history[-1].reason


def test_check_safety_has_no_side_effects(textbook_config):
    engine = AllocationEngine(textbook_config)
    engine.request_resources(1, [1, 0, 2])
    history_len = len(engine.history)

    first = engine.check_safety()
    second = engine.check_safety()

    assert first == second
    assert len(engine.history) == history_len


def test_full_textbook_round(textbook_config):
    engine = AllocationEngine(textbook_config)
    plays = [
        (1, [1, 0, 2]), (1, [0, 2, 0]), 1,
        (3, [0, 1, 1]), 3,
        (0, [7, 4, 3]), 0,
        (2, [6, 0, 0]), 2,
        (4, [4, 3, 1]),
    ]

    for play in plays:
        if isinstance(play, tuple):
            assert engine.request_resources(*play).granted, play
        else:
            engine.release_resources(play)
        assert_invariants(engine)

    assert engine.completed
    assert engine.score == 5 * PROCESS_COMPLETION_POINTS + ROUND_COMPLETION_BONUS
    assert engine.complete_round() == {
        'completed': True, 'score': engine.score, 'remaining': []
    }


def test_reset_restores_initial_state(textbook_config):
    engine = AllocationEngine(textbook_config)
    initial = state_bytes(engine)
    engine.request_resources(1, [1, 2, 2])
    engine.release_resources(1)
    assert engine.score > 0

    engine.reset()

    assert state_bytes(engine) == initial
    assert engine.history == ()
    assert engine.score == 0
    assert not engine.completed
    assert engine.state.finished == (False,) * 5


def test_history_is_append_only(textbook_config):
    engine = AllocationEngine(textbook_config)
    engine.request_resources(1, [1, 0, 2])
    snapshot = engine.history

    engine.request_resources(0, [0, 2, 0])

    assert len(snapshot) == 1
    assert engine.history[0] is snapshot[0]
    with pytest.raises(AttributeError):
        engine.history[0].granted = False
    assert [e.granted for e in engine.history_log.granted()] == [True]
    assert len(engine.history_log.denied()) == 1
    assert len(engine.history_log.for_process(0)) == 1


def test_snapshot_payload(textbook_config):
    engine = AllocationEngine(textbook_config)
    engine.request_resources(1, [1, 0, 2])

    data = engine.snapshot()

    for key in ('processes', 'resources', 'allocation', 'max_demand', 'available',
                'total_resources', 'score', 'completed', 'history'):
        assert key in data
    assert data['available'] == [2, 3, 0]
    assert data['history'][0]['granted'] is True


def test_complete_round_lists_remaining(textbook_config):
    engine = AllocationEngine(textbook_config)
    engine.request_resources(3, [0, 1, 1])

    summary = engine.complete_round()

    assert not summary['completed']
    assert summary['remaining'] == ['P0', 'P1', 'P2', 'P4']


def test_engine_logs_decisions(textbook_config, tmp_path):
    log_path = tmp_path / "engine.log"
    logger = EngineLogger(log_file=str(log_path), echo=False)
    engine = AllocationEngine(textbook_config, session_id="s1", logger=logger)

    engine.request_resources(1, [1, 0, 2])
    engine.request_resources(0, [0, 2, 0])
    engine.release_resources(1)
    logger.close()

    text = log_path.read_text()
    assert "Session s1: P1 requests [1, 0, 2] - GRANTED" in text
    assert "Session s1: P0 requests [0, 2, 0] - DENIED" in text
    assert "Session s1: P1 releases [3, 0, 2]" in text


def test_random_play_preserves_invariants(textbook_config):
    """Random requests/releases never break conservation or safety."""
    rng = random.Random(1234)
    engine = AllocationEngine(textbook_config)

    for _ in range(500):
        i = rng.randrange(5)
        if rng.random() < 0.2:
            engine.release_resources(i)
        else:
            request = [rng.randint(0, 3) for _ in range(3)]
            before = state_bytes(engine)
            result = engine.request_resources(i, request)
            if not result.granted:
                assert state_bytes(engine) == before
        assert_invariants(engine)

    assert engine.score >= 0


def test_score_keeper_rewards_once():
    scores = ScoreKeeper()

    assert scores.record_process_completion(2) == PROCESS_COMPLETION_POINTS
    assert scores.record_process_completion(2) == 0
    assert scores.record_round_completion() == ROUND_COMPLETION_BONUS
    assert scores.record_round_completion() == 0
    assert scores.score == PROCESS_COMPLETION_POINTS + ROUND_COMPLETION_BONUS
