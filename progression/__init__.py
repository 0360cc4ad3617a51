"""
coach-progression: competence tracking for a communication coaching path.

Turns exercise outcomes into a competence distribution, a proficiency
score, a level and a set of unlocked achievements.
"""

__version__ = "1.0.0"
