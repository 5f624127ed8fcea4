"""Contains exceptions raised by the synchronization workflow."""


class SynchronizationError(Exception):
    """Raised when a step of the synchronization workflow fails.

    The failing step is named in the message and the underlying exception is
    chained as ``__cause__``.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        """Initializes the exception with the failed operation and its cause."""
        super().__init__(f"{operation}: {cause}")
        self.operation = operation


def format_cause_chain(error: BaseException) -> list[str]:
    """Return the messages of ``error`` and every exception chained below it."""
    messages: list[str] = []
    current: BaseException | None = error
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        messages.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return messages
