from fastapi import HTTPException
from travonex.services.errors import Rejection, RejectionKind

_STATUS = {
    RejectionKind.VALIDATION: 400,
    RejectionKind.NOT_FOUND: 404,
    RejectionKind.BUSINESS_RULE: 409,
    RejectionKind.CONCURRENCY: 409,
}

def raise_rejection(rejection: Rejection):
    raise HTTPException(status_code=_STATUS[rejection.kind], detail=rejection.as_dict())

def unwrap(result):
    """Return a service result, turning a Rejection into the matching HTTP error."""
    if isinstance(result, Rejection):
        raise_rejection(result)
    return result
