"""Error taxonomy shared by the quiz engine and the HTTP layer.

Services raise these; ``main.py`` registers a single handler that turns
them into ``{"detail": ..., "code": ...}`` JSON responses.
"""


class QuizEngineError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"detail": self.detail, "code": self.code}


class Unauthorized(QuizEngineError):
    status_code = 401
    default_detail = "Unauthorized"


class Forbidden(QuizEngineError):
    status_code = 403
    default_detail = "Forbidden"


class NotFound(QuizEngineError):
    status_code = 404
    default_detail = "Not found"


class InvalidState(QuizEngineError):
    status_code = 409
    default_detail = "Attempt is not active"


class TimeLimitExceeded(QuizEngineError):
    status_code = 400
    default_detail = "Time limit exceeded"


class ValidationError(QuizEngineError):
    status_code = 422
    default_detail = "Invalid request payload"


class RenderFailed(QuizEngineError):
    status_code = 502
    default_detail = "Certificate rendering failed"


class InternalError(QuizEngineError):
    pass
