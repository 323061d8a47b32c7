from __future__ import annotations


class BranchOutError(Exception):
    """Base error for the content adaptation service."""


class InputError(BranchOutError):
    """Raised when an adaptation request is rejected before any work starts."""


class RemoteUnavailable(BranchOutError):
    """The hosted completion call failed or returned something unusable."""
