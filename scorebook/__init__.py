"""
Ball-by-ball Cricket Scoring Engine

Records a limited-overs match one delivery at a time and derives the live
scorecard (score, wickets, batting and bowling figures, players on field,
innings and match result) by replaying the innings event log on every read.
"""

__version__ = "0.1.0"
