from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import ResponseMeta
    from .result import Result

# (bytes read this chunk, total bytes read, total bytes expected or None)
ProgressHandler = Callable[[int, int, int | None], None]
StreamHandler = Callable[[bytes], None]
CompletionHandler = Callable[
    [str | None, "ResponseMeta | None", bytes | None, BaseException | None], None
]
ResultHandler = Callable[[str | None, "ResponseMeta | None", "Result[Any]"], None]
