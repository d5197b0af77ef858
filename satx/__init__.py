"""
satx: adaptive practice engine.

Selects the next quiz for a learner, tracks per-topic mastery with
ELO-style ratings, and assembles ordered practice sessions.
"""

__version__ = "1.0.0"
