from typing import Any, Awaitable, Callable, Dict, Optional, Protocol


class ErrorRecoveryLike(Protocol):
    async def handle_error(self,
                           error_msg: str,
                           *,
                           retry_func: Optional[Callable[[], Awaitable[Any]]] = None,
                           default: Any = None,
                           diagnostics: Optional[Dict[str, Any]] = None) -> Any:
        """
        Called when one action's relevance scoring fails during retrieval.
        The returned value stands in for the failed score; implementations
        that cannot recover should return ``default`` (0.5 for retrieval).
        """
