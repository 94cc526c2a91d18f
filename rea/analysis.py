import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rea.conflict_detection import ConflictDetector
from rea.conflict_types import Conflict
from rea.granular_conflicts import detect_all_conflicts
from rea.resolution_engine_like import ResolutionEngineLike
from rea.severity import SeverityModel

logger = logging.getLogger("REA.ConflictAnalysis")


class ConflictAnalyzer:
    """Runs every detector over a set of reasoning paths and grades the result.

    Detection, severity and resolution are separate collaborators; only the
    resolution engine is optional, and without one ``resolve`` returns no
    resolutions.
    """

    def __init__(
        self,
        *,
        detector: Optional[ConflictDetector] = None,
        severity_model: Optional[SeverityModel] = None,
        resolution_engine: Optional[ResolutionEngineLike] = None,
    ) -> None:
        self.detector = detector or ConflictDetector()
        self.severity_model = severity_model or SeverityModel()
        self.resolution_engine = resolution_engine
        logger.info("ConflictAnalyzer initialized (resolution=%s)", "yes" if resolution_engine else "no")

    def analyze(
        self,
        reasoning_paths: Sequence[Mapping[str, Any]],
        dilemma: Optional[Mapping[str, Any]] = None,
        granular_elements: Sequence[Mapping[str, Any]] = (),
    ) -> Dict[str, Any]:
        if not isinstance(reasoning_paths, (list, tuple)):
            raise TypeError("reasoning_paths must be a list or tuple")

        structural = detect_all_conflicts(reasoning_paths, dilemma, granular_elements)
        same_action = self.detector.detect_path_conflicts(reasoning_paths)

        graded = self.severity_model.assess(
            same_action + structural["all"], granular_elements, reasoning_paths
        )
        counts = Counter(c.type.value for c in graded)
        logger.info("Analysis produced %d conflicts: %s", len(graded), dict(counts))
        return {
            "conflicts": graded,
            "by_type": dict(counts),
            "by_severity": dict(Counter(c.severity.value for c in graded)),
        }

    def resolve(
        self,
        reasoning_paths: Sequence[Mapping[str, Any]],
        conflicts: Sequence[Conflict],
        dilemma: Optional[Mapping[str, Any]] = None,
        granular_elements: Sequence[Mapping[str, Any]] = (),
        *,
        strategy: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if self.resolution_engine is None:
            logger.warning("No resolution engine configured; %d conflicts left unresolved", len(conflicts))
            return []
        return self.resolution_engine.resolve(
            reasoning_paths,
            [c.to_dict() for c in conflicts],
            dilemma,
            granular_elements,
            strategy=strategy,
        )
