import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from rea.records import extract_dilemma_text, prepare_action_text
from rea.text_similarity import cosine_similarity, extract_keywords

logger = logging.getLogger("REA.ActionRelevance")

NEUTRAL_RELEVANCE = 0.5

DOMAIN_KEYWORDS: Dict[str, Sequence[str]] = {
    "medical": ("healthcare", "medical", "hospital", "patient", "treatment", "doctor", "nurse", "surgery"),
    "surveillance": ("privacy", "surveillance", "security", "camera", "monitor", "tracking", "facial", "recognition"),
    "environmental": ("environment", "pollution", "emission", "climate", "sustainable", "green", "waste", "recycling"),
    "business": ("business", "profit", "market", "company", "corporate", "investor", "shareholder", "economic"),
}

DOMAIN_ACTION_TERMS: Dict[str, Sequence[str]] = {
    "medical": ("medical", "treatment", "patient", "allocate"),
    "surveillance": ("privacy", "surveillance", "camera", "security"),
    "environmental": ("environment", "pollution", "sustainable", "green"),
    "business": ("business", "profit", "company", "economic"),
}


class ActionRelevanceScorer:
    """Scores how pertinent an action is to a precedent, given the dilemma.

    Base score is the term-frequency cosine between the action text and
    the precedent text; description keywords, dilemma domain and numeric
    parameters then add bounded boosts.
    """

    def __init__(self, *, domain_keywords: Optional[Dict[str, Sequence[str]]] = None, max_keyword_boost: float = 0.15):
        self.domain_keywords = {**DOMAIN_KEYWORDS, **(domain_keywords or {})}
        self.max_keyword_boost = float(max_keyword_boost)
        logger.info("ActionRelevanceScorer initialized (%d domains)", len(self.domain_keywords))

    async def score(self, dilemma: Any, action: Any, precedent: Any) -> float:
        if not dilemma or not action or not precedent:
            logger.warning("Missing input for action relevance; using neutral score")
            return NEUTRAL_RELEVANCE

        dilemma_text = dilemma if isinstance(dilemma, str) else extract_dilemma_text(dilemma)
        action_text = self._action_text(action)
        if isinstance(precedent, str):
            precedent_text = precedent
        elif isinstance(precedent, Mapping) and precedent.get("description"):
            precedent_text = str(precedent["description"])
        else:
            precedent_text = extract_dilemma_text(precedent)

        if not dilemma_text.strip() or not action_text.strip() or not precedent_text.strip():
            return NEUTRAL_RELEVANCE

        base = cosine_similarity(action_text, precedent_text)
        boosted = self.apply_contextual_boosting(base, action_text, dilemma)
        logger.debug("Action relevance for %r: base=%.4f boosted=%.4f", action_text[:40], base, boosted)
        return boosted

    @staticmethod
    def _action_text(action: Any) -> str:
        if isinstance(action, str):
            return action
        if isinstance(action, Mapping):
            if action.get("description"):
                return str(action["description"])
            for key in ("action", "name"):
                if action.get(key):
                    return prepare_action_text(str(action[key]))
        return str(action)

    def apply_contextual_boosting(self, base_score: float, action_text: str, dilemma: Any) -> float:
        if not isinstance(dilemma, Mapping):
            return base_score

        boosted = base_score
        action_lower = action_text.lower()

        description = dilemma.get("description")
        if isinstance(description, str) and description:
            hits = sum(1 for k in extract_keywords(description) if k in action_lower)
            if hits:
                boosted += min(self.max_keyword_boost, hits * 0.05)

        contexts = dilemma.get("contexts")
        if isinstance(contexts, (list, tuple)):
            for domain, keywords in self.domain_keywords.items():
                in_domain = any(
                    isinstance(c, str) and any(k in c.lower() for k in keywords) for c in contexts
                )
                if in_domain and any(t in action_lower for t in DOMAIN_ACTION_TERMS.get(domain, ())):
                    logger.debug("Domain boost (%s) applied", domain)
                    boosted += 0.1

        params = dilemma.get("parameters")
        if isinstance(params, Mapping):
            scarcity = params.get("resource_scarcity")
            if isinstance(scarcity, (int, float)) and scarcity > 0.5 and ("allocate" in action_lower or "triage" in action_lower):
                boosted += scarcity * 0.1
            privacy = params.get("privacy_impact")
            if isinstance(privacy, (int, float)) and privacy > 0.5 and ("privacy" in action_lower or "data" in action_lower):
                boosted += privacy * 0.1

        return min(1.0, boosted)
