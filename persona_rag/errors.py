"""
Error taxonomy shared by adapters, the retriever and the public surfaces.
"""

from __future__ import annotations


class PersonaRagError(Exception):
    """Base class for every error raised by the pipeline."""


class InvalidConfiguration(PersonaRagError):
    """Bad chunking parameters, missing credentials or a missing document."""


class EmptyInput(PersonaRagError):
    """Caller passed an empty document, question or text batch."""


class BackendUnavailable(PersonaRagError):
    """Transport, auth or timeout failure of an external backend."""

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        self.message = message
        super().__init__(f"[{backend}] {message}")


class RateLimited(BackendUnavailable):
    """Backend throttled the request; eligible for retry with backoff."""


class DimensionMismatch(PersonaRagError):
    """Embedding dimensionality disagrees with the vector index."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Vector dimension mismatch: index={expected}, got={actual}")


class MissingVariable(PersonaRagError):
    """A prompt template variable was absent at render time."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Prompt variable '{name}' is missing")


class EmptyCompletion(PersonaRagError):
    """Language model returned no text."""


TRANSIENT_ERRORS = (BackendUnavailable,)


__all__ = [
    "PersonaRagError",
    "InvalidConfiguration",
    "EmptyInput",
    "BackendUnavailable",
    "RateLimited",
    "DimensionMismatch",
    "MissingVariable",
    "EmptyCompletion",
    "TRANSIENT_ERRORS",
]
