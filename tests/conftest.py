import pytest

from flowaudit.model.workflow import Node, Workflow


def _node(id, type="n8n-nodes-base.set", name=None, **kwargs):
    return Node(id=id, name=name or f"Step {id}", type=type, position=(0, 0), **kwargs)


def _workflow(nodes=(), connections=None, name="Sample workflow", **kwargs):
    return Workflow(id="wf-1", name=name, nodes=tuple(nodes), connections=connections or {}, **kwargs)


@pytest.fixture
def make_node():
    return _node


@pytest.fixture
def make_workflow():
    return _workflow


@pytest.fixture
def linear_doc():
    """Persisted A -> B document on the main channel."""
    return {
        "id": "wf-ab",
        "name": "Linear pair",
        "nodes": [
            {"id": "A", "name": "Start", "type": "n8n-nodes-base.manualTrigger",
             "typeVersion": 1, "position": [0, 0], "parameters": {}},
            {"id": "B", "name": "Shape", "type": "n8n-nodes-base.set",
             "typeVersion": 1, "position": [200, 0], "parameters": {}},
        ],
        "connections": {
            "A": {"main": [{"node": "B", "type": "main", "index": 0}]},
        },
    }
