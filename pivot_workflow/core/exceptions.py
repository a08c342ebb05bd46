class PivotWorkflowError(Exception):
    """Base exception for the pivot workflow engine."""

    pass


class RecordStoreError(PivotWorkflowError):
    """Raised when the backing decision record store cannot be reached or read."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Decision record store {operation} failed: {reason}")
