from typing import Any, Mapping, Optional, Protocol


class FrameworkRegistryLike(Protocol):
    def get_framework_by_name(self, name: str) -> Optional[Any]: ...


class FrameworkImportanceLike(Protocol):
    def __call__(self, framework: Any, dilemma: Optional[Mapping[str, Any]]) -> float:
        """Return how much the framework matters for the dilemma, in [0,1]."""
