"""Error hierarchy shared by the API and the consumer.

Services and repositories raise these; HTTP translation happens only in
``api.main`` and the worker loop turns them into job failures.
"""
from typing import Optional


class SolidWriterError(Exception):
    """Base exception for generation pipeline operations."""

    def __init__(self, message: str, resource_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.resource_id = resource_id


class ValidationError(SolidWriterError):
    """Missing or invalid input, rejected before any state is created."""

    pass


class NotFoundError(SolidWriterError):
    """Unknown job or voice profile id."""

    pass


class ConflictOrNotFoundError(SolidWriterError):
    """A conditional write matched nothing.

    Either another worker won the claim, the job already reached a terminal
    state, or the record vanished. Losing workers skip the job.
    """

    pass


class GenerationError(SolidWriterError):
    """External text generation failed.

    Retried by the worker pool up to its attempt bound, terminal for a
    streaming session.
    """

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, resource_id)
        self.status_code = status_code


class EmbeddingError(SolidWriterError):
    """Embedding model unavailable or failed. Never retried."""

    pass
