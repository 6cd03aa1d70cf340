# flowaudit/structural/schema.py

from typing import Any, List

from jsonschema import Draft7Validator

_TARGET = {
    "type": "object",
    "required": ["node", "type", "index"],
    "properties": {
        "node": {"type": "string", "minLength": 1},
        # input channel on the target, e.g. "main"
        "type": {"type": "string", "minLength": 1},
        "index": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": True,
}

WORKFLOW_DOCUMENT_SCHEMA = {
    "type": "object",
    "required": ["id", "name", "nodes", "connections"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1},
        "active": {"type": "boolean"},
        "settings": {"type": "object"},
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "name", "type", "position"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string", "minLength": 1},
                    # dotted behavioral kind, e.g. n8n-nodes-base.httpRequest
                    "type": {
                        "type": "string",
                        "pattern": "^[A-Za-z0-9_@/-]+\\.[A-Za-z0-9_.-]+$",
                    },
                    "typeVersion": {"type": "number", "minimum": 1},
                    "position": {
                        "type": "array",
                        "items": {"type": "number"},
                        "minItems": 2,
                        "maxItems": 2,
                    },
                    "parameters": {"type": "object"},
                    "disabled": {"type": "boolean"},
                    "continueOnFail": {"type": "boolean"},
                    "retryOnFail": {"type": "boolean"},
                    "maxTries": {"type": "integer", "minimum": 1},
                    "notes": {"type": "string"},
                },
                "additionalProperties": True,
            },
        },
        "connections": {
            "type": "object",
            # source node id -> output channel -> targets
            "additionalProperties": {
                "type": "object",
                "additionalProperties": {
                    "type": "array",
                    "items": {
                        # flat target, or an n8n export target group
                        "anyOf": [
                            _TARGET,
                            {"type": "array", "items": _TARGET},
                        ]
                    },
                },
            },
        },
    },
    "additionalProperties": True,
}

_VALIDATOR = Draft7Validator(WORKFLOW_DOCUMENT_SCHEMA)


def check_document(doc: Any) -> List[str]:
    """
    Validate a persisted workflow document against the JSON Schema.
    Returns one "[SCHEMA]" message per violation, ordered by location.
    """
    issues: List[str] = []
    for err in sorted(_VALIDATOR.iter_errors(doc), key=lambda e: [str(p) for p in e.absolute_path]):
        location = "/".join(str(p) for p in err.absolute_path) or "<root>"
        issues.append(f"[SCHEMA] {location}: {err.message}")
    return issues
