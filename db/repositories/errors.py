"""
Persistence-layer exceptions for the milestone store.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for milestone store failures (transport or database)."""


class MilestoneNotFoundError(StoreError):
    """Raised when an update targets a milestone id that no longer exists."""


class ProjectNotFoundError(StoreError):
    """Raised when an insert references a project key that does not resolve."""
