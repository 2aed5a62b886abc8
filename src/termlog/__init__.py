"""termlog - terminal note logging backed by a small HTTP record service."""

__version__ = "1.0.0"
