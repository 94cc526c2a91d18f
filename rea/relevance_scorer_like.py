from typing import Any, Dict, Protocol, Union


class ActionRelevanceScorerLike(Protocol):
    async def score(self, dilemma: Any, action: Any, precedent: Any) -> Union[float, Dict[str, Any]]:
        """
        Returns either a float in [0,1] or a dict with at least one of:
            - boosted_score: float in [0,1]
            - base_score: float in [0,1]
        May raise; callers treat a failure as a neutral 0.5.
        """
