"""
Maps TillError codes onto HTTP responses.
"""
from fastapi import Request
from fastapi.responses import JSONResponse

from ..exceptions import TillError

STATUS_BY_CODE = {
    "WRONG_PIN": 403,
    "ADMIN_LOCKED": 403,
    "PRODUCT_NOT_FOUND": 404,
    "BAND_NOT_FOUND": 404,
    "UNIT_NOT_FOUND": 404,
    "LINE_NOT_FOUND": 404,
}


async def till_error_handler(request: Request, exc: TillError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 400),
        content={"detail": exc.as_dict()},
    )
