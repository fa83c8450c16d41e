from .types import CompletionHandler, ProgressHandler, StreamHandler


class HandlerRegistry:
    """Ordered storage for the three observer kinds of a request.

    Not synchronized on its own; the owning request serializes every access
    through its lock.
    """

    def __init__(self):
        self._progress: list[ProgressHandler] = []
        self._stream: list[StreamHandler] = []
        self._completion: list[CompletionHandler] = []

    def add_progress(self, handler: ProgressHandler) -> None:
        self._progress.append(handler)

    def add_stream(self, handler: StreamHandler) -> None:
        self._stream.append(handler)

    def add_completion(self, handler: CompletionHandler) -> None:
        self._completion.append(handler)

    @property
    def progress_handlers(self) -> tuple[ProgressHandler, ...]:
        return tuple(self._progress)

    @property
    def stream_handlers(self) -> tuple[StreamHandler, ...]:
        return tuple(self._stream)

    def pop_completion(self) -> CompletionHandler | None:
        """Remove and return the oldest completion handler, if any.

        Handlers appended while the queue is being drained are returned too.
        """
        if not self._completion:
            return None
        return self._completion.pop(0)

    def clear(self) -> None:
        self._progress.clear()
        self._stream.clear()
        self._completion.clear()

    def __len__(self) -> int:
        return len(self._progress) + len(self._stream) + len(self._completion)
