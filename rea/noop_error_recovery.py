import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger("REA.ErrorRecovery")


@dataclass
class NoopErrorRecovery:
    """Recovery stub: never retries, always hands back the caller's default.

    Messages are kept in ``handled`` so callers can see what was absorbed.
    """
    handled: List[str] = field(default_factory=list)

    async def handle_error(self, error_msg: str, *, retry_func: Optional[Callable[[], Awaitable[Any]]] = None, default: Any = None, diagnostics: Optional[Dict[str, Any]] = None) -> Any:
        self.handled.append(error_msg)
        logger.debug("ErrorRecovery(noop): %s %s", error_msg, diagnostics or "")
        return default
