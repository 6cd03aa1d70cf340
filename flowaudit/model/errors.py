# flowaudit/model/errors.py


class FlowAuditError(Exception):
    """Base class for errors raised by the engine."""


class DuplicateIdentifier(FlowAuditError):
    """A node id collides with a node already present in the workflow."""

    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Node id '{node_id}' already exists in workflow")


class NodeNotFound(FlowAuditError):
    """Raised by strict updates when the target node id does not exist."""

    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' not found in workflow")
