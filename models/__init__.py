"""
Data models for the Banker's Algorithm game engine.
Resource types, processes, immutable session snapshots and the error taxonomy.
"""
