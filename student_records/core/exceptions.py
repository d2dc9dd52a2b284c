from typing import Any, Dict, Optional


class StudentRecordsError(Exception):
    """
    Parent class for every custom error raised by the application.
    Gives the shell a uniform message/code to report.
    """
    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(self.message)


# =========================================================
# STORE ERRORS
# =========================================================

class StoreConnectionError(StudentRecordsError, ConnectionError):
    """
    The store cannot be reached or rejected the credentials.
    Fatal to the operation that needed the connection; never retried.
    """
    def __init__(self, message: str = "Cannot connect to database", details: dict = None):
        super().__init__(
            message=message,
            code="STORE_CONNECTION_ERROR",
            details=details
        )


class DuplicateKeyError(StudentRecordsError):
    """A uniqueness constraint (students.email) rejected the row."""
    def __init__(self, message: str = "Duplicate key", details: dict = None):
        super().__init__(
            message=message,
            code="DUPLICATE_KEY",
            details=details
        )


class StoreError(StudentRecordsError):
    """Any other I/O or query failure reported by the store."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(
            message=f"Database Error: {message}",
            code="STORE_ERROR",
            details=details
        )
