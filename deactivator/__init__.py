"""Failed Job Deactivator: annotate, log and email about deactivated or deleted jobs."""

__version__ = "1.0.0"
