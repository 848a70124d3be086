"""
Maps registration results onto HTTP status codes.
The body is always the full result so clients can show `message` as-is.
"""

from fastapi import status
from fastapi.responses import JSONResponse

from eventgate.schemas.registration import Outcome, RegistrationError, RegistrationResult

SUCCESS_STATUS = {
    Outcome.ADMITTED: status.HTTP_201_CREATED,
    Outcome.INVITED: status.HTTP_201_CREATED,
    Outcome.WAITLISTED: status.HTTP_202_ACCEPTED,
}

ERROR_STATUS = {
    RegistrationError.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    RegistrationError.ALREADY_CHECKED_IN: status.HTTP_409_CONFLICT,
    RegistrationError.INVITE_REQUIRED: status.HTTP_403_FORBIDDEN,
    RegistrationError.INVALID_INVITE_CODE: status.HTTP_403_FORBIDDEN,
    RegistrationError.REGISTRATION_CLOSED: status.HTTP_403_FORBIDDEN,
    RegistrationError.EVENT_IN_PAST: status.HTTP_400_BAD_REQUEST,
    RegistrationError.NOT_REGISTERED: status.HTTP_404_NOT_FOUND,
    RegistrationError.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RegistrationError.STORE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def result_status_code(result: RegistrationResult) -> int:
    if result.success:
        return SUCCESS_STATUS.get(result.outcome, status.HTTP_200_OK)
    return ERROR_STATUS.get(result.reason, status.HTTP_400_BAD_REQUEST)


def result_response(result: RegistrationResult) -> JSONResponse:
    return JSONResponse(
        status_code=result_status_code(result),
        content=result.model_dump(mode="json"),
    )
