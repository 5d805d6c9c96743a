"""GhostScore sync: per-employer hiring-experience scores computed from survey reports."""

__version__ = "1.0.0"
