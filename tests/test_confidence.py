import pytest

from flowaudit.confidence.scorer import (
    ConfidenceFactor,
    confidence_level,
    score_confidence,
    score_node_type_suggestion,
    score_resource_locator,
    score_workflow_validation,
)
from flowaudit.model.workflow import Workflow


def test_half_matched_weight():
    """Half the weight matched is 0.5, which the band table labels Low, not Medium."""
    res = score_confidence([{"weight": 0.5, "matched": True}, {"weight": 0.5, "matched": False}])
    assert res.value == 0.5
    # 0.5 sits in [0.4, 0.6)
    assert res.level == "Low"
    assert res.reason == "Low confidence (50%) - 1 of 2 factors matched"
    assert [f.name for f in res.factors] == ["factor-1", "factor-2"]


@pytest.mark.parametrize(
    "value, level",
    [
        (0.0, "Very Low"),
        (0.39, "Very Low"),
        (0.4, "Low"),
        (0.59, "Low"),
        (0.6, "Medium"),
        (0.8, "High"),
        (0.89, "High"),
        (0.9, "Very High"),
        (1.0, "Very High"),
    ],
)
def test_bands(value, level):
    assert confidence_level(value) == level


def test_no_weight_is_zero():
    res = score_confidence([])
    assert res.value == 0.0
    assert res.level == "Very Low"
    assert score_confidence([ConfidenceFactor("x", 0.0, True)]).value == 0.0


def test_rounding_to_two_decimals():
    res = score_confidence([
        ConfidenceFactor("a", 1.0, True),
        ConfidenceFactor("b", 1.0, True),
        ConfidenceFactor("c", 1.0, False),
    ])
    assert res.value == 0.67
    assert res.level == "Medium"


def test_resource_locator():
    res = score_resource_locator("url", "n8n-nodes-base.httpRequest", "https://api.example.com")
    assert res.value == 1.0
    assert res.level == "Very High"

    res = score_resource_locator("colour", "n8n-nodes-base.set", "red green")
    assert res.value == 0.0


def test_node_type_suggestion():
    res = score_node_type_suggestion("slack", "n8n-nodes-base.slack", "post to slack")
    assert res.value == 1.0

    res = score_node_type_suggestion("mail", "n8n-nodes-base.gmail")
    assert res.value == 0.3
    assert res.level == "Very Low"


def test_workflow_validation_confidence(linear_doc):
    wf = Workflow.from_dict(linear_doc)
    clean = score_workflow_validation(wf, [])
    assert clean.value == 1.0

    res = score_workflow_validation(wf, [{"type": "warning", "message": "no notes"}])
    assert res.value == 0.7
    assert res.level == "Medium"

    empty = score_workflow_validation(Workflow(id="w", name="Empty"), [{"type": "error"}])
    assert empty.value == 0.3
