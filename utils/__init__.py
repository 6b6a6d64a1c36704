"""
Utilities for the Banker's Algorithm game engine.
Vector arithmetic, game configuration loading and logging.
"""
