# flowaudit/engine.py
"""
In-process entry point of the audit engine.

    validate_structure(workflow)            -> StructureReport
    mutate.add_node / remove_node / ...     -> Workflow
    validate_categories(workflow, ...)      -> ValidationResult
    analyze(workflow, ...)                  -> AnalysisResult
    score_confidence(factors)               -> ConfidenceScore
    audit(document_or_workflow, ...)        -> AuditReport
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from flowaudit.analysis.analyzer import AnalysisResult, analyze
from flowaudit.config import DEFAULT_CONFIG, AuditConfig
from flowaudit.confidence.scorer import score_confidence
from flowaudit.model import mutate
from flowaudit.model.workflow import Workflow
from flowaudit.quality.validator import ValidationResult, validate_categories
from flowaudit.structural.checker import StructureReport, validate_structure
from flowaudit.utils.logger import get_logger, timed, workflow_logger

logger = get_logger("engine")

__all__ = [
    "AuditReport",
    "analyze",
    "audit",
    "mutate",
    "score_confidence",
    "validate_categories",
    "validate_structure",
]


@dataclass
class AuditReport:
    structure: StructureReport
    validation: Optional[ValidationResult] = None
    analysis: Optional[AnalysisResult] = None

    @property
    def aborted(self) -> bool:
        """True when the shape was too broken to run the quality passes."""
        return bool(self.structure.irrecoverable)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "structure": self.structure.to_dict(),
            "validation": self.validation.to_dict() if self.validation else None,
            "analysis": self.analysis.to_dict() if self.analysis else None,
        }


def audit(
    workflow: Union[Workflow, Mapping[str, Any]],
    strictness: Optional[str] = None,
    categories: Optional[Iterable[str]] = None,
    include_patterns: bool = True,
    include_analysis: bool = True,
    config: Optional[AuditConfig] = None,
    parallel: bool = False,
) -> AuditReport:
    """
    Structural validation first; category validation and the composite
    analysis only run when the graph shape is usable. Dangling references are
    reported but do not stop the quality passes.
    """
    config = config or DEFAULT_CONFIG
    if isinstance(workflow, Workflow):
        workflow_id = workflow.id
    else:
        workflow_id = workflow.get("id") if isinstance(workflow, Mapping) else None
    log = workflow_logger(logger, workflow_id)

    with timed(log, "structural check"):
        structure = validate_structure(workflow)
    report = AuditReport(structure=structure)
    if structure.irrecoverable:
        log.warning("audit stopped after structural check: %s", "; ".join(structure.irrecoverable))
        return report

    wf = workflow if isinstance(workflow, Workflow) else Workflow.from_dict(workflow)
    report.validation = validate_categories(
        wf, strictness=strictness, categories=categories, config=config, parallel=parallel,
    )
    if include_analysis:
        report.analysis = analyze(wf, include_patterns=include_patterns, config=config)
    return report
