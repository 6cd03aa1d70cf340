# flowaudit/quality/validator.py

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from flowaudit.config import DEFAULT_CONFIG, AuditConfig, check_strictness, normalize_category
from flowaudit.model.workflow import Workflow
from flowaudit.quality.categories import ANALYZERS, CategoryResult
from flowaudit.utils.logger import get_logger, timed, workflow_logger

logger = get_logger("quality")


@dataclass
class ValidationResult:
    passed: bool
    score: int
    categories: Dict[str, CategoryResult] = field(default_factory=dict)
    total_issues: int = 0
    critical_issues: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "score": self.score,
            "categories": {k: v.to_dict() for k, v in self.categories.items()},
            "total_issues": self.total_issues,
            "critical_issues": self.critical_issues,
        }


def validate_categories(
    workflow: Workflow,
    strictness: Optional[str] = None,
    categories: Optional[Iterable[str]] = None,
    config: Optional[AuditConfig] = None,
    parallel: bool = False,
) -> ValidationResult:
    """
    Run the requested category analyzers and aggregate them.

    The overall score is the rounded mean of the category scores; the result
    passes only when no category reported any issue. With `parallel=True`
    the analyzers run on a thread pool. They share no mutable state, so the
    result is identical.
    """
    config = config or DEFAULT_CONFIG
    strictness = check_strictness(strictness or config.strictness)
    names = [normalize_category(c) for c in (categories if categories is not None else config.categories)]
    # keep order, drop repeats
    names = list(dict.fromkeys(names))

    log = workflow_logger(logger, workflow.id)
    log.debug("validating (strictness=%s, categories=%s)", strictness, names)

    def run(name: str) -> CategoryResult:
        return ANALYZERS[name](workflow, strictness, config)

    with timed(log, "category validation"):
        if parallel and len(names) > 1:
            with ThreadPoolExecutor(max_workers=len(names)) as pool:
                outcomes = list(pool.map(run, names))
        else:
            outcomes = [run(name) for name in names]
    results = dict(zip(names, outcomes))

    total_issues = sum(len(r.issues) for r in results.values())
    critical_issues = sum(r.critical for r in results.values())
    average = sum(r.score for r in results.values()) / len(results) if results else 0

    result = ValidationResult(
        passed=total_issues == 0 and critical_issues == 0,
        score=round(average),
        categories=results,
        total_issues=total_issues,
        critical_issues=critical_issues,
    )
    log.info(
        "validated: passed=%s score=%d issues=%d critical=%d",
        result.passed, result.score, total_issues, critical_issues,
    )
    return result
