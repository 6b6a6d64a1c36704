#!/usr/bin/env python3
"""
Banker's Algorithm Round Player
Main entry point for scripted play-throughs of the Round 2 engine.

Loads a game configuration, initializes one session and replays the
scripted actions, logging each decision.
"""

import argparse
import sys
from typing import Dict, List, Optional

from models.errors import BankersError, ConfigurationError
from sessions.game import BankersGame
from utils.logger import EngineLogger
from utils.scenario_loader import DEFAULT_GAME_CONFIG, GameConfig, load_game_config


def run_game(
    config: GameConfig,
    actions: List[Dict],
    session_id: str = "cli",
    logger: Optional[EngineLogger] = None
) -> BankersGame:
    """
    Replay scripted actions against a fresh session.

    Action order is the order given in the script. Hard failures on a
    single action (bad process index, malformed vector) are logged and the
    replay continues.

    Args:
        config: Game configuration
        actions: Scripted actions (see utils.scenario_loader)
        session_id: Session identifier to use
        logger: Logger instance (a quiet one is created if omitted)

    Returns:
        The BankersGame holding the played session
    """
    if logger is None:
        logger = EngineLogger(echo=False)
    game = BankersGame(config=config, logger=logger)

    logger.log(f"\n{'='*60}")
    logger.log("ROUND START")
    if config.description:
        logger.log(config.description)
    logger.log(f"{'='*60}\n")

    game.initialize(session_id)
    engine = game.store.get(session_id)
    logger.log(engine.state.display())
    game.check_safety(session_id)

    for step, action in enumerate(actions):
        logger.log(f"\n{'-'*60}")
        logger.log(f"Action {step}: {action['type']}")
        logger.log(f"{'-'*60}")
        try:
            _apply_action(game, session_id, action, logger)
        except BankersError as e:
            logger.log(f"Action {step} rejected: {e}", "error")

    logger.log(f"\n{'='*60}")
    logger.log("ROUND OVER")
    logger.log(f"{'='*60}\n")

    _display_statistics(game, session_id, logger)
    return game


def _apply_action(game: BankersGame, session_id: str, action: Dict, logger: EngineLogger) -> None:
    """Dispatch one scripted action."""
    action_type = action['type']

    if action_type == 'request':
        game.request_resources(session_id, action['process'], action['request'])
    elif action_type == 'release':
        game.release_resources(session_id, action['process'])
    elif action_type == 'check':
        game.check_safety(session_id)
    elif action_type == 'reset':
        game.reset(session_id)
    elif action_type == 'complete':
        logger.log(game.complete(session_id)['message'])

    if logger.verbose:
        for row in game.store.get(session_id).state.summary_rows():
            logger.log(f"  {row}", "debug")


def _display_statistics(game: BankersGame, session_id: str, logger: EngineLogger) -> None:
    """Display final round statistics."""
    engine = game.store.get(session_id)
    history = engine.history_log
    state = engine.state

    logger.log("Round Statistics:")
    logger.log(f"  Total Processes: {state.num_processes}")
    logger.log(f"  Finished: {sum(state.finished)}")
    logger.log(f"\n  Granted Actions: {len(history.granted())}")
    logger.log(f"  Denied Requests: {len(history.denied())}")
    logger.log(f"  Score: {engine.score}")
    logger.log(f"  Completed: {'YES' if engine.completed else 'NO'}")

    if history.entries:
        logger.log("\nHistory:")
        logger.log(history.display())


def main():
    """Main entry point for the round player."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm Round Player"
    )
    parser.add_argument(
        '--scenario',
        type=str,
        default=None,
        help='Path to game configuration JSON file (default: built-in textbook instance)'
    )
    parser.add_argument(
        '--session',
        type=str,
        default='cli',
        help='Session identifier to play under (default: cli)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )

    args = parser.parse_args()

    with EngineLogger(verbose=args.verbose, log_file=args.log_file) as logger:
        if args.scenario:
            try:
                config, actions = load_game_config(args.scenario)
            except ConfigurationError as e:
                logger.log(f"Failed to load configuration: {e}", "error")
                return 1
        else:
            config, actions = DEFAULT_GAME_CONFIG, []

        run_game(config, actions, args.session, logger)
    return 0


if __name__ == '__main__':
    sys.exit(main())
