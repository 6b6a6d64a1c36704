"""
Session store and the Round 2 operations exposed to the transport layer.
"""
