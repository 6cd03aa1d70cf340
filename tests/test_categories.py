import pytest

from flowaudit.config import AuditConfig
from flowaudit.quality.categories import (
    analyze_documentation,
    analyze_error_handling,
    analyze_naming,
    analyze_performance,
    analyze_security,
)
from flowaudit.quality.validator import validate_categories

HTTP = "n8n-nodes-base.httpRequest"


def test_http_without_auth_fails_security(make_node, make_workflow):
    wf = make_workflow([make_node("h1", type=HTTP, name="Fetch Orders")])
    res = analyze_security(wf, "high")

    assert not res.passed
    assert res.critical == 0
    assert len(res.issues) == 1
    assert "without authentication" in res.issues[0]
    assert res.score == 75


def test_duplicate_names_are_critical(make_node, make_workflow):
    wf = make_workflow([make_node("a", name="Fetch"), make_node("b", name="Fetch")])
    res = analyze_naming(wf)

    assert not res.passed
    assert res.critical >= 1
    assert any("duplicate node name" in i for i in res.issues)
    assert res.score == 70


def test_naming_checks(make_node, make_workflow):
    wf = make_workflow([make_node("a", type=HTTP, name="httpRequest1")], name="ETL")
    res = analyze_naming(wf, "medium")
    assert res.issues == ["Workflow name is too short", "1 nodes have default names"]
    assert res.score == 60

    # low strictness keeps only the critical checks
    assert analyze_naming(wf, "low").passed

    res = analyze_naming(make_workflow([], name="  "))
    assert res.issues == ["Workflow name is missing"]
    assert res.critical == 1


def test_hardcoded_secret_vs_expression(make_node, make_workflow):
    literal = make_node("a", name="Login", parameters={"password": "hunter2"})
    expression = make_node("b", name="Login via env", parameters={"password": "={{$env.PASSWORD}}"})
    selector = make_node("c", type=HTTP, name="Call", parameters={"authentication": "headerAuth"})

    res = analyze_security(make_workflow([literal, expression, selector]), "medium")
    assert res.issues == ["Node 'Login' may contain hardcoded sensitive data"]
    assert res.critical == 1
    assert res.score == 60


def test_performance_rules(make_node, make_workflow):
    loop = make_node("l", type="custom.loop", name="Walk pages")
    capped = make_node("m", type="custom.loop", name="Walk capped", parameters={"maxIterations": 10})
    res = analyze_performance(make_workflow([loop, capped]))
    assert res.issues == ["1 loop nodes without iteration limits"]
    assert res.critical == 1

    calls = [make_node(f"h{i}", type=HTTP, name=f"Call {i}") for i in range(4)]
    res = analyze_performance(make_workflow(calls))
    assert res.issues == ["Multiple HTTP requests that could potentially be parallelized"]
    assert res.score == 85
    assert analyze_performance(make_workflow(calls, settings={"parallel": True})).passed

    big = [make_node(str(i), name=f"Step number {i}") for i in range(51)]
    assert analyze_performance(make_workflow(big), "medium").passed
    res = analyze_performance(make_workflow(big), "high")
    assert res.issues == ["Workflow has 51 nodes, which may impact performance"]


def test_error_handling_rules(make_node, make_workflow):
    guarded = make_node("h1", type=HTTP, name="Guarded", retry_on_fail=True)
    bare = make_node("h2", type=HTTP, name="Bare")
    res = analyze_error_handling(make_workflow([guarded, bare]))
    assert res.issues == ["No error handling found in workflow", "1 HTTP nodes without error handling"]
    assert res.score == 60

    trigger = make_node("e", type="n8n-nodes-base.errorTrigger", name="On failure")
    assert analyze_error_handling(make_workflow([guarded, trigger])).passed
    assert analyze_error_handling(make_workflow([guarded], settings={"errorWorkflow": "wf-9"})).passed


def test_documentation_rules(make_node, make_workflow):
    nodes = [
        make_node("a", notes="explains a"),
        make_node("b"),
        make_node("c"),
        make_node("s", type="n8n-nodes-base.stickyNote", name="Readme"),
    ]
    wf = make_workflow(nodes)
    assert analyze_documentation(wf, "medium").issues == ["Workflow lacks description"]
    res = analyze_documentation(wf, "high")
    assert res.issues == ["Workflow lacks description", "Only 33% of nodes are documented"]
    assert res.score == 70

    documented = make_workflow(nodes[:1], settings={"description": "one step"})
    assert analyze_documentation(documented, "high").passed


@pytest.mark.parametrize("strictness", ["low", "medium", "high"])
def test_more_issues_never_raise_the_score(make_node, make_workflow, strictness):
    base = [make_node("h1", type=HTTP, name="Fetch")]
    worse = base + [make_node("h2", type=HTTP, name="Fetch", parameters={"token": "abc"})]

    before = validate_categories(make_workflow(base), strictness=strictness)
    after = validate_categories(make_workflow(worse), strictness=strictness)
    for name, cat in after.categories.items():
        assert cat.score <= before.categories[name].score
        assert 0 <= cat.score <= 100


def test_validation_aggregate(make_node, make_workflow):
    wf = make_workflow([make_node("a", name="Fetch"), make_node("b", name="Fetch")])
    res = validate_categories(wf, strictness="medium", categories=["naming", "errorHandling", "naming"])

    assert list(res.categories) == ["naming", "error_handling"]
    assert res.score == round((70 + 80) / 2)
    assert res.total_issues == 2
    assert res.critical_issues == 1
    assert not res.passed


def test_validation_rejects_unknown_options(make_workflow):
    with pytest.raises(ValueError):
        validate_categories(make_workflow(), strictness="extreme")
    with pytest.raises(ValueError):
        validate_categories(make_workflow(), categories=["style"])


def test_parallel_matches_serial(make_node, make_workflow):
    wf = make_workflow([
        make_node("h1", type=HTTP, name="httpRequest", parameters={"apiKey": "123"}),
        make_node("l1", type="custom.loop", name="Loop"),
    ])
    serial = validate_categories(wf, strictness="high")
    parallel = validate_categories(wf, strictness="high", parallel=True)
    assert serial.to_dict() == parallel.to_dict()


def test_config_penalties_override(make_node, make_workflow):
    cfg = AuditConfig.from_mapping({"penalties": {"security": {"penalty": 50}}})
    wf = make_workflow([make_node("h1", type=HTTP, name="Fetch")])
    assert analyze_security(wf, "medium", cfg).score == 50
