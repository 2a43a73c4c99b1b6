"""Exceptions raised by the linebreeding engine and its collaborators.

ValidationError and NotFoundError are raised before any partial result is
produced. CollaboratorError is what a Dog Lookup implementation raises when
its backing store fails; the engine lets it propagate unchanged.
"""
from __future__ import annotations
from typing import Optional


class PedigreeError(Exception):
    """Base class for all pedigree_py errors."""


class ValidationError(PedigreeError, ValueError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(PedigreeError, LookupError):
    def __init__(self, dog_id: str) -> None:
        super().__init__(f"Dog {dog_id} not found")
        self.dog_id = dog_id


class CollaboratorError(PedigreeError):
    """The dog lookup backend is unavailable or failed."""
