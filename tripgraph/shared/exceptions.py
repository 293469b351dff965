"""
Exception hierarchy for the trip planner.

Step-level failures are absorbed by the step boundary and recorded in the
run metadata. Only CheckpointError is allowed to escape a workflow run.
"""


class TripGraphError(Exception):
    """Base class for all trip planner errors."""

    pass


class ProviderError(TripGraphError):
    """Raised when a remote collaborator (POI, routing, weather) fails."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ParseError(TripGraphError):
    """Raised when an LLM response cannot be parsed into the expected JSON."""

    pass


class CheckpointError(TripGraphError):
    """Raised when the checkpointer fails to save or load a thread."""

    def __init__(self, thread_id: str, message: str):
        self.thread_id = thread_id
        super().__init__(f"checkpoint failure for thread '{thread_id}': {message}")


class ThreadNotFoundError(TripGraphError):
    """Raised when a run is resumed for a thread with no checkpoint."""

    def __init__(self, thread_id: str):
        self.thread_id = thread_id
        super().__init__(f"no checkpoint for thread '{thread_id}'")
