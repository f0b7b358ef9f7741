"""Aircraft systems package.

Currently holds the engine subsystem. Each system is a plain class with
explicit state, advanced once per simulation tick.
"""
