from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence


class ResolutionEngineLike(Protocol):
    def resolve(self,
                reasoning_paths: Sequence[Mapping[str, Any]],
                conflicts: Sequence[Mapping[str, Any]],
                dilemma: Optional[Mapping[str, Any]],
                granular_elements: Sequence[Mapping[str, Any]],
                *,
                strategy: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Consumes conflict records as produced by Conflict.to_dict() and
        returns one resolution record per conflict it handled.
        """
