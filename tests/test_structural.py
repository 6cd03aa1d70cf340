import math

from flowaudit.model.workflow import Workflow
from flowaudit.structural.checker import validate_structure
from flowaudit.structural.metrics import compute_graph_metrics
from flowaudit.structural.schema import check_document


def test_empty_workflow_is_valid():
    report = validate_structure({"id": "w", "name": "Empty", "nodes": [], "connections": {}})
    assert report.valid
    assert report.errors == []


def test_valid_document_and_model_agree(linear_doc):
    assert validate_structure(linear_doc).valid
    assert validate_structure(Workflow.from_dict(linear_doc)).valid
    assert check_document(linear_doc) == []


def test_errors_accumulate(linear_doc):
    linear_doc["id"] = ""
    linear_doc["nodes"][1]["type"] = None
    linear_doc["nodes"][1]["position"] = [1, math.nan]
    linear_doc["connections"]["A"]["main"].append({"node": "ghost", "type": "", "index": -1})
    linear_doc["connections"]["gone"] = {"main": []}

    report = validate_structure(linear_doc)
    assert not report.valid
    assert report.irrecoverable == []
    assert report.errors == [
        "Workflow ID is required",
        "Node 1: Type is required",
        "Node 1: Position must be an array of two numbers",
        "Connection A.main[1]: Target node ghost not found",
        "Connection A.main[1]: Connection type is required",
        "Connection A.main[1]: Connection index must be non-negative",
        "Connection source node gone not found",
    ]


def test_bad_shapes_are_irrecoverable():
    report = validate_structure({"id": "w", "name": "Broken", "nodes": {}, "connections": []})
    assert not report.valid
    assert report.irrecoverable == [
        "Workflow nodes must be an array",
        "Workflow connections must be an object",
    ]

    report = validate_structure({"id": "w", "name": "Broken", "nodes": ["oops"], "connections": {}})
    assert report.irrecoverable == ["Node 0: must be an object"]

    report = validate_structure(["not", "a", "workflow"])
    assert report.errors == ["Workflow must be an object"]


def test_connection_entry_checks(linear_doc):
    linear_doc["connections"]["A"] = {
        "main": [{"type": "main", "index": "0"}],
        "error": "B",
    }
    errors = validate_structure(linear_doc).errors
    assert "Connection A.main[0]: Target node is required" in errors
    assert "Connection A.main[0]: Connection index must be a number" in errors
    assert "Connections for A.error must be an array" in errors


def test_boolean_position_is_rejected(linear_doc):
    linear_doc["nodes"][0]["position"] = [True, 0]
    assert validate_structure(linear_doc).errors == ["Node 0: Position must be an array of two numbers"]


def test_schema_reports_locations(linear_doc):
    linear_doc["nodes"][0]["position"] = [0]
    linear_doc["connections"]["A"]["main"][0]["index"] = -2
    issues = check_document(linear_doc)
    assert any(i.startswith("[SCHEMA] nodes/0/position:") for i in issues)
    assert any("connections/A/main/0" in i for i in issues)


def test_graph_metrics(linear_doc):
    metrics = compute_graph_metrics(Workflow.from_dict(linear_doc))
    assert metrics["n_nodes"] == 2
    assert metrics["n_edges"] == 1
    assert metrics["acyclic"] is True
    assert metrics["connected_ratio"] == 1.0
    assert metrics["longest_path"] == 1

    linear_doc["connections"]["B"] = {"main": [{"node": "A", "type": "main", "index": 0}]}
    cyclic = compute_graph_metrics(Workflow.from_dict(linear_doc))
    assert cyclic["acyclic"] is False
    assert cyclic["longest_path"] == -1

    assert compute_graph_metrics(Workflow(id="w", name="Empty"))["n_nodes"] == 0


def test_unhashable_ids_are_reported_not_raised(linear_doc):
    linear_doc["nodes"][1]["id"] = ["B"]
    linear_doc["connections"]["A"]["main"].append({"node": {"id": "B"}, "type": "main", "index": 0})

    report = validate_structure(linear_doc)
    assert not report.valid
    assert report.irrecoverable == []
    assert "Node 1: ID must be a string" in report.errors
    assert "Connection A.main[0]: Target node B not found" in report.errors
    assert "Connection A.main[1]: Target node must be a string" in report.errors
