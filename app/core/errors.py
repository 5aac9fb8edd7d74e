from typing import Any, Dict, Optional

DEFAULT_ERROR_DETAIL = "Unexpected error encountered"


class AttributeSpecError(ValueError):
    """Raised when an attribute spec string cannot be compiled into rules."""

    def __init__(self, spec: str, field: str, reason: str):
        self.spec = spec
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid attribute spec field '{field}': {reason}")


class StoreError(RuntimeError):
    """
    A batch lookup failed because one of its DynamoDB queries failed.

    Wraps the first underlying error and carries a human readable detail that
    the HTTP layer returns to the caller.
    """

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail or DEFAULT_ERROR_DETAIL
        self.cause = cause

    @classmethod
    def from_exception(
        cls, err: BaseException, detail: Optional[str] = None
    ) -> "StoreError":
        # The caller's detail wins, then whatever detail the error already has
        detail = detail or getattr(err, "detail", None)
        return cls(str(err) or type(err).__name__, detail=detail, cause=err)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self.cause).__name__ if self.cause else type(self).__name__,
            "message": self.message,
            "detail": self.detail,
        }
