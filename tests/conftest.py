import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rea.conflict_detection import ConflictDetector  # noqa: E402
from rea.similarity import SimilarityEngine  # noqa: E402
from rea.similarity_cache import SimilarityCache  # noqa: E402


@pytest.fixture
def cache():
    return SimilarityCache()


@pytest.fixture
def engine(cache):
    return SimilarityEngine(cache=cache)


@pytest.fixture
def detector():
    return ConflictDetector()


@pytest.fixture
def welfare_path():
    return {
        "id": "p1",
        "framework": "Utilitarianism",
        "conclusion": "allocate",
        "action": "allocate",
        "argument": "This maximises utility and overall welfare.",
    }


@pytest.fixture
def rights_path():
    return {
        "id": "p2",
        "framework": "Deontology",
        "conclusion": "allocate",
        "action": "allocate",
        "argument": "Each patient has a right to autonomy.",
    }
