"""Exceptions raised by the pairing engine and its collaborators."""
from __future__ import annotations


class PairingError(Exception):
    """Base class for pairing failures that are not business outcomes."""


class RepositoryUnavailable(PairingError):
    """The profile store could not be reached or failed mid-operation.

    Callers should treat this as "try again later". It is deliberately kept
    apart from an ``UNMATCHED`` result, which is a normal outcome.
    """


class IdentityUnavailable(PairingError):
    """The identity provider did not become ready or could not be reached."""


__all__ = ["PairingError", "RepositoryUnavailable", "IdentityUnavailable"]
