"""
errors.py

Exceptions raised while turning guess feedback into constraints.
"""


class ConstraintConflict(ValueError):
    """Feedback rows that no single equation can satisfy."""


class MalformedFeedback(ConstraintConflict):
    """A feedback row or tile that does not have the expected shape."""
