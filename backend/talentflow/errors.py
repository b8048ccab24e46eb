"""
Error taxonomy shared by the store, the service and the controller.

    NetworkError       simulated transient failure, triggers rollback
    NotFoundError      unknown id passed to an update operation
    ValidationError    bad input, rejected before any simulated call
    CorruptStateError  unparseable store entry, downgraded to a reseed
"""


class TalentFlowError(Exception):
    """Base class for data layer errors."""


class NetworkError(TalentFlowError):
    def __init__(self, message: str = "A random network error occurred."):
        super().__init__(message)


class NotFoundError(TalentFlowError):
    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class ValidationError(TalentFlowError):
    pass


class CorruptStateError(TalentFlowError):
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored value for {key!r} is unreadable: {reason}")
