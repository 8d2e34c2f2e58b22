from __future__ import annotations

from fastapi.responses import JSONResponse

from draft.errors import (
    AlreadyResolvedError,
    DataIntegrityError,
    DraftError,
    NotFoundError,
    NotYourPickError,
    PickIndexOutOfRangeError,
)


def _draft_error_status(error: DraftError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (AlreadyResolvedError, NotYourPickError)):
        return 409
    if isinstance(error, PickIndexOutOfRangeError):
        return 422
    if isinstance(error, DataIntegrityError):
        return 500
    return 400


def _draft_error_response(error: DraftError) -> JSONResponse:
    payload = {
        "ok": False,
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details,
        },
    }
    return JSONResponse(status_code=_draft_error_status(error), content=payload)
