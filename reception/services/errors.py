# reception/services/errors.py
"""
Error taxonomy shared by services and routers.
Services raise these; main.py turns them into {"error": {"kind", "message"}} responses.
"""


class ReceptionError(Exception):
    kind = "ReceptionError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(ReceptionError):
    kind = "ValidationError"
    status_code = 400


class AuthError(ReceptionError):
    kind = "AuthError"
    status_code = 401


class NotFoundError(ReceptionError):
    kind = "NotFoundError"
    status_code = 404


class CapacityError(ReceptionError):
    kind = "CapacityError"
    status_code = 409


class AlreadyActiveError(ReceptionError):
    kind = "AlreadyActiveError"
    status_code = 409


class AlreadyCheckedOutError(ReceptionError):
    kind = "AlreadyCheckedOutError"
    status_code = 409


class ActiveVisitorError(ReceptionError):
    kind = "ActiveVisitorError"
    status_code = 409


class ConflictError(ReceptionError):
    kind = "ConflictError"
    status_code = 409


class InternalError(ReceptionError):
    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
