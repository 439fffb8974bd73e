# livegraph/core/exceptions.py
class GraphSyncError(Exception):
    """Base class for every failure raised while synchronising the graph."""
    def __init__(self, message="Graph synchronisation failed."):
        self.message = message
        super().__init__(self.message)


class TransportError(GraphSyncError):
    """Raised when the RPC endpoint cannot be reached or answers with an HTTP error."""
    def __init__(self, message="Transport failure while contacting the graph provider."):
        super().__init__(message)


class DecodeError(GraphSyncError):
    """Raised when the RPC response cannot be decoded into a snapshot or delta."""
    def __init__(self, message="Malformed response from the graph provider."):
        super().__init__(message)


class NotFoundError(GraphSyncError):
    """Raised by strict reconciliation when a removal references an unknown identity."""
    def __init__(self, message="Vertex or edge not found."):
        super().__init__(message)


class InvariantViolation(GraphSyncError):
    """Raised when applying a delta would duplicate an identity or leave a dangling edge."""
    def __init__(self, message="Graph state invariant violated."):
        super().__init__(message)
