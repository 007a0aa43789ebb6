"""Domain exceptions raised by services and translated to HTTP by the routes."""


class CompetitionError(Exception):
    """Base class for rule violations. ``code`` is stable and machine-readable."""

    code = "competition_error"

    def __init__(self, message: str, code: str | None = None, **detail):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.detail = detail

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.detail}


class NotFoundError(CompetitionError):
    code = "not_found"


class PermissionDeniedError(CompetitionError):
    code = "forbidden"


class RuleViolationError(CompetitionError):
    """The request conflicts with a team or registration rule."""

    code = "rule_violation"


class InvalidInputError(CompetitionError):
    """A submitted document failed validation."""

    code = "invalid_input"
