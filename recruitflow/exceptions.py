"""
Typed exceptions raised by the service layer.

Routes never inspect message text.  Each exception carries a
machine-readable ``code`` and the HTTP status the API maps it to, and
the application factory registers one error handler for the whole
hierarchy::

    RecruitFlowError
    +-- NotFoundError          NOT_FOUND          404
    +-- ForbiddenError         FORBIDDEN          403
    +-- ValidationError        VALIDATION_ERROR   400
    +-- InvalidStateError      INVALID_STATE      409
        +-- AlreadyConsumedError  ALREADY_CONSUMED  409

None of these are retried by the caller.
"""


class RecruitFlowError(Exception):
    """Base class for all service-layer errors."""

    code: str = "RECRUITFLOW_ERROR"
    http_status: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        """Return the JSON error body sent to API clients."""
        return {"success": False, "code": self.code, "message": self.message}


class NotFoundError(RecruitFlowError):
    """The requested entity (or stage of an entity) does not exist."""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity_type: str, entity_id):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} not found.")


class ForbiddenError(RecruitFlowError):
    """The acting user's role does not allow the operation."""

    code = "FORBIDDEN"
    http_status = 403


class ValidationError(RecruitFlowError):
    """The request body is incomplete or malformed."""

    code = "VALIDATION_ERROR"
    http_status = 400


class InvalidStateError(RecruitFlowError):
    """
    The entity is not in a state that allows the operation.

    Raised for already-decided stages, out-of-order decisions, and
    conditional updates that lost a race to a concurrent request.
    """

    code = "INVALID_STATE"
    http_status = 409


class AlreadyConsumedError(InvalidStateError):
    """A fully approved requisition has already been used to create a job."""

    code = "ALREADY_CONSUMED"

    def __init__(self, requisition_number: str, job_id: int | None = None):
        self.requisition_number = requisition_number
        self.job_id = job_id
        super().__init__(
            f"A job has already been created for requisition {requisition_number}."
        )
