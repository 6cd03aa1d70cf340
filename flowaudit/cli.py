#!/usr/bin/env python3
# flowaudit/cli.py

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
import yaml

from flowaudit.analysis.analyzer import analyze
from flowaudit.config import STRICTNESS_LEVELS, AuditConfig, load_config
from flowaudit.engine import audit
from flowaudit.model.workflow import Workflow
from flowaudit.quality.validator import validate_categories
from flowaudit.structural.checker import validate_structure
from flowaudit.structural.schema import check_document
from flowaudit.utils.io import load_any, write_json
from flowaudit.utils.logger import init_logger

app = typer.Typer(help="flowaudit CLI - structural checks and quality scores for workflow graphs")


def _load_document(path: Path) -> dict:
    try:
        doc = load_any(path)
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise typer.BadParameter(f"Cannot read workflow {path}: {e}")
    if not isinstance(doc, dict):
        raise typer.BadParameter(f"{path} does not contain a workflow object")
    return doc


def _load_config(path: Optional[Path]) -> AuditConfig:
    try:
        return load_config(path)
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise typer.BadParameter(f"Invalid config {path}: {e}")


def _check_strictness(strictness: Optional[str]) -> Optional[str]:
    if strictness is not None and strictness not in STRICTNESS_LEVELS:
        raise typer.BadParameter(
            f"Invalid strictness '{strictness}'. Choose one of: {', '.join(STRICTNESS_LEVELS)}"
        )
    return strictness


def _write_report(report: Optional[Path], payload: dict) -> None:
    if report is not None:
        write_json(report, payload)
        print(f"[ok] wrote report to {report}")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    init_logger(level=logging.DEBUG if verbose else None)


@app.command()
def check(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow JSON/YAML document"),
    schema: bool = typer.Option(True, "--schema/--no-schema", help="Also validate against the document JSON Schema"),
):
    """
    Structural validation: required fields, node shapes, dangling connections.
    """
    doc = _load_document(input)
    result = validate_structure(doc)
    issues = list(result.errors)
    if schema:
        issues.extend(check_document(doc))

    if not issues:
        print("[ok] workflow structure is valid")
        return
    print("Detected issues:")
    for it in issues:
        print(f"- {it}")
    raise typer.Exit(code=1)


@app.command()
def validate(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow JSON/YAML document"),
    strictness: Optional[str] = typer.Option(None, "--strictness", "-s", help="low | medium | high"),
    category: Optional[List[str]] = typer.Option(None, "--category", "-c", help="Restrict to a category (repeatable)"),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, help="JSON/YAML config file"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path"),
):
    """
    Category validation (naming, security, performance, error handling, documentation).
    """
    cfg = _load_config(config)
    strictness = _check_strictness(strictness)
    wf = Workflow.from_dict(_load_document(input))
    try:
        result = validate_categories(wf, strictness=strictness, categories=category or None, config=cfg)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    print(f"Score:   {result.score}/100")
    print(f"Passed:  {result.passed}")
    for name, cat in result.categories.items():
        print(f"  {name:<15} {cat.score:>3}  {'ok' if cat.passed else 'FAIL'}")
        for issue in cat.issues:
            print(f"    - {issue}")

    _write_report(report, result.to_dict())
    if not result.passed:
        raise typer.Exit(code=1)


@app.command(name="analyze")
def analyze_cmd(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow JSON/YAML document"),
    patterns: bool = typer.Option(True, "--patterns/--no-patterns", help="Detect patterns and anti-patterns"),
    with_validation: bool = typer.Option(False, "--with-validation", help="Include high-strictness category issues"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path"),
):
    """
    Composite 0-10 assessment: complexity, performance, security, maintainability.
    """
    wf = Workflow.from_dict(_load_document(input))
    result = analyze(wf, include_patterns=patterns, include_validation=with_validation)

    print(f"Complexity:      {result.complexity}")
    print(f"Performance:     {result.performance}")
    print(f"Security:        {result.security}")
    print(f"Maintainability: {result.maintainability}")
    print(f"Overall:         {result.overall}")
    if result.patterns:
        print("Patterns: " + ", ".join(result.patterns))
    if result.anti_patterns:
        print("Anti-patterns: " + ", ".join(result.anti_patterns))
    for rec in result.recommendations:
        print(f"- {rec}")

    _write_report(report, result.to_dict())


@app.command()
def bench(
    glob: str = typer.Option("bench/quality/*/workflow.json", "--glob", help="Glob for workflow documents"),
    out: Path = typer.Option(Path("experiments/results/report.csv"), "--out", help="CSV path to write results"),
    strictness: Optional[str] = typer.Option(None, "--strictness", "-s", help="low | medium | high"),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, help="JSON/YAML config file"),
    dump_details: bool = typer.Option(False, "--dump-details", help="Dump per-workflow JSON next to each input"),
):
    """
    Batch audit of workflow documents into a CSV report.
    """
    import glob as _glob
    import pandas as pd

    cfg = _load_config(config)
    strictness = _check_strictness(strictness)

    rows = []
    for fp_str in sorted(_glob.glob(glob)):
        fp = Path(fp_str)
        doc = load_any(fp)
        if not isinstance(doc, dict) or "nodes" not in doc:
            print(f"[skip] {fp} does not look like a workflow document (missing 'nodes'); skipping")
            continue

        rep = audit(doc, strictness=strictness, config=cfg)
        row = {
            "id": fp.parent.name,
            "structure_ok": rep.structure.valid,
            "structure_errors": len(rep.structure.errors),
        }
        if rep.validation is not None:
            row["validation_score"] = rep.validation.score
            row["passed"] = rep.validation.passed
            row["critical"] = rep.validation.critical_issues
            for name, cat in rep.validation.categories.items():
                row[name] = cat.score
        if rep.analysis is not None:
            row["complexity"] = rep.analysis.complexity
            row["performance"] = rep.analysis.performance
            row["security"] = rep.analysis.security
            row["maintainability"] = rep.analysis.maintainability
        rows.append(row)

        if dump_details:
            with open(fp.parent / "flowaudit_detail.json", "w", encoding="utf-8") as f:
                json.dump(rep.to_dict(), f, ensure_ascii=False, indent=2)

    out.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(out, index=False)
    print(f"[ok] wrote {out}")


if __name__ == "__main__":
    app()
