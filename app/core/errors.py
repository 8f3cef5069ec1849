"""
errors.py

도메인 예외(Domain Error) 계층 및 FastAPI 예외 핸들러.

서비스 계층은 HTTP를 모르는 상태로 이 예외들만 발생시키고,
main.py에 등록된 핸들러가 상태 코드와 응답 바디({message})로 변환한다.

예외 분류:
- ValidationFailed   : 입력값 오류 (400)
- InvalidTransition  : 상태 전이 규칙 위반 (400)
- NotAuthenticated   : 인증 필요 (401)
- PermissionDenied   : 권한 부족 / 소유자 아님 (403)
- NotFound           : 대상 없음 (404)

"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransition(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotAuthenticated(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(DomainError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 필드 단위 오류를 그대로 내려줘서 폼에서 표시할 수 있게 함
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    logger.info("Validation error on %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"message": "Invalid request", "errors": errors}),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
