"""
Algorithms package for the Banker's Algorithm game engine.
Contains the safety checker and the per-session allocation engine.
"""
