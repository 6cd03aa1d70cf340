# flowaudit/quality/categories.py
"""
Category rule sets for pass/fail workflow validation.

Each analyzer reads an immutable Workflow plus a strictness level
("low" | "medium" | "high") and returns a CategoryResult. Scores start at 100
and lose a category-specific penalty per non-critical issue and a larger one
per critical point, floored at 0. Missing optional fields count as absent;
analyzers never raise on malformed workflows.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from flowaudit.config import DEFAULT_CONFIG, AuditConfig
from flowaudit.model.workflow import Workflow
from flowaudit.utils.graph import (
    has_authentication,
    has_default_name,
    has_error_handling,
    has_hardcoded_secret,
    has_iteration_cap,
    http_nodes,
    is_error_trigger,
    is_loop_node,
    is_note_node,
)


@dataclass
class CategoryResult:
    passed: bool
    score: int
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    critical: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "score": self.score,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
            "critical": self.critical,
        }


class _Findings:
    """Issue accumulator for one category run."""

    def __init__(self, category: str, config: AuditConfig):
        self.category = category
        self.config = config
        self.issues: List[str] = []
        self.suggestions: List[str] = []
        self.critical = 0
        self._plain = 0

    def add(self, issue: str, suggestion: str, critical: int = 0) -> None:
        self.issues.append(issue)
        if suggestion not in self.suggestions:
            self.suggestions.append(suggestion)
        if critical:
            self.critical += critical
        else:
            self._plain += 1

    def result(self) -> CategoryResult:
        penalty, critical_penalty = self.config.penalty_for(self.category)
        score = max(0, 100 - self._plain * penalty - self.critical * critical_penalty)
        return CategoryResult(
            passed=not self.issues,
            score=score,
            issues=self.issues,
            suggestions=self.suggestions,
            critical=self.critical,
        )


def analyze_naming(workflow: Workflow, strictness: str = "medium",
                   config: Optional[AuditConfig] = None) -> CategoryResult:
    config = config or DEFAULT_CONFIG
    f = _Findings("naming", config)

    name = str(workflow.name or "").strip()
    if not name:
        f.add("Workflow name is missing", "Add a descriptive name to the workflow", critical=1)
    elif len(name) < config.short_name_length and strictness != "low":
        f.add("Workflow name is too short",
              "Use a more descriptive name that indicates the workflow's purpose")

    defaults = {n.name for n in workflow.nodes if has_default_name(n)}
    if defaults and strictness != "low":
        f.add(f"{len(defaults)} nodes have default names",
              "Rename nodes to better describe their purpose in the workflow")

    counts = Counter(n.name for n in workflow.nodes if isinstance(n.name, str) and n.name)
    duplicates = sorted(str(nm) for nm, c in counts.items() if c > 1)
    if duplicates:
        f.add(f"Found {len(duplicates)} duplicate node names: {', '.join(duplicates)}",
              "Ensure each node has a unique name to avoid confusion",
              critical=len(duplicates))

    return f.result()


def analyze_security(workflow: Workflow, strictness: str = "medium",
                     config: Optional[AuditConfig] = None) -> CategoryResult:
    f = _Findings("security", config or DEFAULT_CONFIG)

    for node in workflow.nodes:
        if has_hardcoded_secret(node):
            f.add(f"Node '{node.name}' may contain hardcoded sensitive data",
                  "Use environment variables or credential stores for sensitive data",
                  critical=1)

    insecure = [n for n in http_nodes(workflow) if not has_authentication(n)]
    if insecure and strictness != "low":
        f.add(f"{len(insecure)} HTTP nodes without authentication",
              "Add proper authentication to HTTP requests")

    return f.result()


def _has_parallel_hint(workflow: Workflow) -> bool:
    if (workflow.settings or {}).get("parallel"):
        return True
    for node in http_nodes(workflow):
        text = node.parameters_text()
        if "batch" in text or "parallel" in text:
            return True
    return False


def analyze_performance(workflow: Workflow, strictness: str = "medium",
                        config: Optional[AuditConfig] = None) -> CategoryResult:
    config = config or DEFAULT_CONFIG
    f = _Findings("performance", config)

    node_count = len(workflow.nodes)
    if node_count > config.max_nodes and strictness == "high":
        f.add(f"Workflow has {node_count} nodes, which may impact performance",
              "Consider breaking down the workflow into smaller, more manageable pieces")

    unbounded = [n for n in workflow.nodes if is_loop_node(n) and not has_iteration_cap(n)]
    if unbounded:
        f.add(f"{len(unbounded)} loop nodes without iteration limits",
              "Add iteration limits to prevent infinite loops",
              critical=len(unbounded))

    # a count heuristic, not proof the requests actually run in sequence
    if len(http_nodes(workflow)) > config.http_burst and not _has_parallel_hint(workflow) \
            and strictness != "low":
        f.add("Multiple HTTP requests that could potentially be parallelized",
              "Consider using parallel execution for independent HTTP requests")

    return f.result()


def analyze_error_handling(workflow: Workflow, strictness: str = "medium",
                           config: Optional[AuditConfig] = None) -> CategoryResult:
    f = _Findings("error_handling", config or DEFAULT_CONFIG)

    has_trigger = any(is_error_trigger(n) for n in workflow.nodes)
    if not has_trigger and not (workflow.settings or {}).get("errorWorkflow") and strictness != "low":
        f.add("No error handling found in workflow",
              "Add an Error Trigger node or set an error workflow in the settings")

    unguarded = [n for n in http_nodes(workflow) if not has_error_handling(n)]
    if unguarded and strictness != "low":
        f.add(f"{len(unguarded)} HTTP nodes without error handling",
              'Enable "Continue on Fail" or "Retry on Fail" for HTTP requests')

    return f.result()


def analyze_documentation(workflow: Workflow, strictness: str = "medium",
                          config: Optional[AuditConfig] = None) -> CategoryResult:
    config = config or DEFAULT_CONFIG
    f = _Findings("documentation", config)

    if not workflow.description and strictness != "low":
        f.add("Workflow lacks description",
              "Add a description explaining the workflow's purpose")

    functional = [n for n in workflow.nodes if not is_note_node(n)]
    if functional and strictness == "high":
        rate = sum(1 for n in functional if n.has_notes()) / len(functional)
        if rate < config.doc_coverage_min:
            f.add(f"Only {round(rate * 100)}% of nodes are documented",
                  "Add notes to important nodes explaining their purpose")

    return f.result()


ANALYZERS: Dict[str, Callable[..., CategoryResult]] = {
    "naming": analyze_naming,
    "security": analyze_security,
    "performance": analyze_performance,
    "error_handling": analyze_error_handling,
    "documentation": analyze_documentation,
}
