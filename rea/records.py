"""Field lookups for the loosely shaped records the engine consumes.

Dilemmas, actions, reasoning paths and granular elements arrive as plain
mappings produced by different upstream generators, so the same concept
can live under different keys. Each chain below is the ordered list of
keys tried for one concept; the first non-empty value wins.

    action display name     name -> action -> id
    action identifier       id -> action -> name
    dilemma actions         possible_actions -> actions
    path action             action -> conclusion
    path conclusion         conclusion -> action
    element content         principle -> content
    contextual factor name  factor -> name
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger("REA.Records")

ACTION_NAME_FIELDS: Tuple[str, ...] = ("name", "action", "id")
ACTION_ID_FIELDS: Tuple[str, ...] = ("id", "action", "name")
DILEMMA_ACTION_FIELDS: Tuple[str, ...] = ("possible_actions", "actions")
PATH_ACTION_FIELDS: Tuple[str, ...] = ("action", "conclusion")
PATH_CONCLUSION_FIELDS: Tuple[str, ...] = ("conclusion", "action")
ELEMENT_CONTENT_FIELDS: Tuple[str, ...] = ("principle", "content")
FACTOR_NAME_FIELDS: Tuple[str, ...] = ("factor", "name")

DEFAULT_DILEMMA_TEXT = "general ethical considerations"

ABBREVIATIONS = {
    "impl": "implement",
    "tech": "technology",
    "sys": "system",
    "auth": "authorization",
    "dev": "develop",
    "app": "application",
    "sec": "security",
    "admin": "administration",
    "mgmt": "management",
    "env": "environment",
    "eval": "evaluate",
    "info": "information",
    "med": "medical",
    "org": "organization",
    "proc": "process",
    "prog": "program",
    "req": "requirement",
    "res": "resource",
    "srv": "service",
    "util": "utility",
}


def first_present(record: Any, fields: Iterable[str], default: Any = None) -> Any:
    if not isinstance(record, Mapping):
        return default
    for name in fields:
        value = record.get(name)
        if value not in (None, "", [], {}):
            return value
    return default


def action_name(action: Any) -> Optional[str]:
    if isinstance(action, str):
        return action
    value = first_present(action, ACTION_NAME_FIELDS)
    return None if value is None else str(value)


def action_id(action: Any) -> Optional[str]:
    if isinstance(action, str):
        return action or None
    value = first_present(action, ACTION_ID_FIELDS)
    return None if value is None else str(value)


def dilemma_actions(dilemma: Any) -> List[Any]:
    actions = first_present(dilemma, DILEMMA_ACTION_FIELDS, [])
    return list(actions) if isinstance(actions, (list, tuple)) else []


def path_action(path: Any) -> Optional[str]:
    return first_present(path, PATH_ACTION_FIELDS)


def path_conclusion(path: Any) -> Optional[str]:
    return first_present(path, PATH_CONCLUSION_FIELDS)


def element_content(element: Any) -> Optional[str]:
    return first_present(element, ELEMENT_CONTENT_FIELDS)


def factor_name(factor: Any) -> Optional[str]:
    value = first_present(factor, FACTOR_NAME_FIELDS)
    return value if isinstance(value, str) else None


def is_principle(element: Any) -> bool:
    if not isinstance(element, Mapping):
        return False
    kind = element.get("type")
    return isinstance(kind, str) and kind.lower() == "principle"


def is_reconciled(path: Any) -> bool:
    return isinstance(path, Mapping) and path.get("source") == "reconciled"


def conflicting_principles(element: Any) -> Sequence[str]:
    listed = element.get("conflicting_principles") if isinstance(element, Mapping) else None
    return listed if isinstance(listed, (list, tuple)) else ()


def extract_dilemma_text(dilemma: Any) -> str:
    """Concatenate the descriptive text of a dilemma for keyword matching."""
    if not isinstance(dilemma, Mapping) or not dilemma:
        return DEFAULT_DILEMMA_TEXT

    parts: List[str] = []
    for key in ("title", "description"):
        if isinstance(dilemma.get(key), str) and dilemma[key]:
            parts.append(dilemma[key])
    for key in ("contexts", "key_terms"):
        values = dilemma.get(key)
        if isinstance(values, (list, tuple)):
            parts.append(" ".join(str(v) for v in values))
    actions = dilemma.get("possible_actions")
    if isinstance(actions, (list, tuple)):
        names = [action_name(a) for a in actions]
        parts.append(" ".join(n for n in names if n))

    parts = [p for p in parts if p]
    return " ".join(parts) if parts else DEFAULT_DILEMMA_TEXT


def prepare_action_text(action: Any, *, expand_abbreviations: bool = False) -> str:
    """Readable text for an action string or action/path record."""
    if isinstance(action, str):
        text = action
    elif isinstance(action, Mapping):
        text = str(first_present(action, ("name", "action", "conclusion"), ""))
        for extra in ("description", "predicted_consequences", "argument"):
            if action.get(extra):
                text += " " + str(action[extra])
    else:
        logger.warning("prepare_action_text: unsupported action type %s", type(action).__name__)
        return ""

    text = text.replace("_", " ").strip()
    if expand_abbreviations:
        text = " ".join(ABBREVIATIONS.get(word.lower(), word) for word in text.split(" "))
    return text
