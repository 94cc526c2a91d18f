import asyncio
import json
import logging

from rea.analysis import ConflictAnalyzer
from rea.framework_importance import FrameworkImportance, StaticFrameworkRegistry
from rea.precedents import PrecedentRetriever
from rea.severity import SeverityModel
from rea.similarity import SimilarityEngine
from rea.similarity_cache import SimilarityCache

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    dilemma = {
        "title": "Ventilator allocation during a shortage",
        "description": "A hospital must decide how to allocate a limited supply of ventilators among patients.",
        "contexts": ["hospital", "patient care"],
        "possible_actions": [
            {"id": "allocate_by_prognosis", "description": "Allocate ventilators to patients with the best prognosis"},
            {"id": "first_come_first_served", "description": "Treat patients in order of arrival"},
        ],
        "parameters": {"resource_scarcity": 0.9},
    }
    precedents = [
        {
            "title": "Organ transplant allocation",
            "description": "A transplant board must allocate scarce organs among waiting patients.",
            "reasoning_paths": [{"framework": "Utilitarianism", "conclusion": "allocate_by_prognosis"}],
        },
        {
            "title": "Library opening hours",
            "description": "A town debates extending weekend opening hours.",
            "reasoning_paths": [{"framework": "Care Ethics", "conclusion": "extend_hours"}],
        },
    ]

    cache = SimilarityCache()
    retriever = PrecedentRetriever(similarity_engine=SimilarityEngine(cache=cache))
    ranked = asyncio.run(retriever.find_relevant_precedents(dilemma, precedents, threshold=0.2))
    print("find_relevant_precedents() ->", json.dumps(
        [{k: p[k] for k in ("title", "total_similarity_score", "action_relevance")} for p in ranked], indent=2))
    print("cache stats ->", cache.stats())

    paths = [
        {"id": "p1", "framework": "Utilitarianism", "conclusion": "allocate_by_prognosis", "dilemma": dilemma,
         "argument": "Maximising welfare and overall utility saves the most lives."},
        {"id": "p2", "framework": "Deontology", "conclusion": "allocate_by_prognosis",
         "argument": "Every patient has an equal right to treatment and their dignity must be respected."},
        {"id": "p3", "framework": "Care Ethics", "conclusion": "first_come_first_served", "depends_on": "p1"},
    ]
    registry = StaticFrameworkRegistry.from_records([
        {"name": "Utilitarianism"}, {"name": "Deontology"}, {"name": "Care Ethics", "aliases": ["care"]},
    ])
    analyzer = ConflictAnalyzer(
        severity_model=SeverityModel(framework_registry=registry, framework_importance=FrameworkImportance(precedents)),
    )
    report = analyzer.analyze(paths, dilemma)
    print("analyze() ->", json.dumps(
        [{k: v for k, v in c.to_dict().items() if k != "paths"} for c in report["conflicts"]], indent=2, default=str))
    print("by_severity ->", report["by_severity"])
