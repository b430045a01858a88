"""Enum types mirroring PostgreSQL custom enums of the marketplace schema."""

from enum import Enum


class UserRole(str, Enum):
    """Role chosen by a profile at sign-up."""
    coder = "coder"
    hirer = "hirer"


class ProjectStatus(str, Enum):
    """Lifecycle status of a posted project."""
    open = "open"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"

    @property
    def label(self) -> str:
        """Human-readable status, e.g. ``in progress``."""
        return self.value.replace("_", " ")


class ApplicationStatus(str, Enum):
    """Decision state of a project application."""
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
