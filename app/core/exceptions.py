from fastapi import status


class AppError(Exception):
    """Base error for domain failures rendered as a ``{success: false}`` envelope."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: dict[str, list[str]] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors

    def to_dict(self) -> dict:
        body: dict = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundError(AppError):
    """Row absent, or owned by someone else."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class BusinessRuleError(AppError):
    """Semantic conflict: duplicates, rows still in use, one-per-period records."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ComputationPreconditionError(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class FieldValidationError(AppError):
    """Field-level failure detected after schema validation (uniqueness, foreign rows)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, field: str, message: str):
        super().__init__("Validation error", errors={field: [message]})
