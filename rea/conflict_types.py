from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class ConflictType(str, Enum):
    PRIORITY = "PRIORITY"
    VALUE = "VALUE"
    FACTUAL = "FACTUAL"
    METHOD = "METHOD"
    PRINCIPLE = "PRINCIPLE"
    CROSS_ACTION_VALUE = "CROSS_ACTION_VALUE"
    CROSS_ACTION_PRINCIPLE = "CROSS_ACTION_PRINCIPLE"
    CIRCULAR_DEPENDENCY = "CIRCULAR_DEPENDENCY"
    ACTION = "ACTION"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    # never produced by the severity model; kept for downstream consumers
    CRITICAL = "critical"


@dataclass
class ResolutionStrategy:
    type: str
    description: str
    frameworks: Optional[List[Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.frameworks is not None:
            out["frameworks"] = list(self.frameworks)
        return out


@dataclass
class Conflict:
    """One detected disagreement between reasoning paths or elements."""
    type: ConflictType
    severity: Severity = Severity.MEDIUM
    framework1: Optional[str] = None
    framework2: Optional[str] = None
    frameworks: Optional[List[Any]] = None
    action: Optional[str] = None
    action1: Optional[str] = None
    action2: Optional[str] = None
    description: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    resolution_strategies: Optional[List[ResolutionStrategy]] = None
    element1: Optional[Mapping[str, Any]] = None
    element2: Optional[Mapping[str, Any]] = None
    paths: Optional[List[Mapping[str, Any]]] = None
    path1_id: Optional[Any] = None
    path2_id: Optional[Any] = None
    id: Optional[str] = None
    reason: Optional[str] = None
    relevance_adjustment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain record for resolution engines; unset optional fields are omitted."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif f.name == "resolution_strategies":
                value = [s.to_dict() for s in value]
            out[f.name] = value
        return out
