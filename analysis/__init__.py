"""
Audit trail and scoring for game sessions.
"""
