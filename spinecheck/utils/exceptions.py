import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from spinecheck.utils.response import error_response

logger = logging.getLogger(__name__)


class AppException(Exception):
    default_message = "요청을 처리할 수 없습니다."
    default_status = 400
    open_settings = False

    def __init__(self, message: str | None = None, status_code: int | None = None, data: Any = None):
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status
        self.data = data
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__

    def payload(self) -> dict:
        data = {"code": self.code}
        if self.open_settings:
            data["open_settings"] = True
        if self.data:
            data["detail"] = self.data
        return data


# Image preparation

class FileReadError(AppException):
    default_message = "파일을 읽을 수 없습니다. 다른 사진을 선택해주세요."


class ImageDecodeError(AppException):
    default_message = "이미지를 열 수 없습니다. JPG 또는 PNG 사진을 업로드해주세요."


class RenderSurfaceError(AppException):
    default_message = "이미지를 처리하는 중 오류가 발생했습니다."
    default_status = 500


# Credentials

class CredentialsMissing(AppException):
    default_message = "API 키가 설정되지 않았습니다. 설정에서 API 키를 입력해주세요."
    default_status = 428
    open_settings = True


class InvalidCredential(AppException):
    default_message = "유효한 API 키를 입력해주세요."
    default_status = 422


# AI analysis

class RateLimited(AppException):
    default_message = "요청 한도를 초과했습니다. 잠시 후 다시 시도하거나 설정에서 개인 API 키를 입력해주세요."
    default_status = 429
    open_settings = True


class AuthFailure(AppException):
    default_message = "API 키가 유효하지 않습니다. 설정에서 API 키를 확인해주세요."
    default_status = 401
    open_settings = True


class BadInput(AppException):
    default_message = "요청이 올바르지 않습니다. 다른 사진으로 다시 시도해주세요."


class ContentPolicyBlock(AppException):
    default_message = "안전 정책에 의해 사진 분석이 차단되었습니다. 다른 사진으로 시도해주세요."
    default_status = 422


class TransportError(AppException):
    default_message = "분석 중 오류가 발생했습니다. 등이 잘 보이는 사진인지 확인한 후 다시 시도해주세요."
    default_status = 502


class EmptyResponse(AppException):
    default_message = "AI 응답이 비어 있습니다. 다시 시도해주세요."
    default_status = 502


class SchemaViolation(AppException):
    default_message = "AI 응답 형식이 올바르지 않습니다. 다시 시도해주세요."
    default_status = 502


# Consultation

class EmailServiceUnavailable(AppException):
    default_message = "상담 신청 서비스를 사용할 수 없습니다. 잠시 후 다시 시도해주세요."
    default_status = 503


class SubmissionError(AppException):
    default_message = "전송 중 오류가 발생했습니다. 다시 시도해주세요."
    default_status = 502


class Busy(AppException):
    default_message = "이미 처리 중인 요청이 있습니다."
    default_status = 409


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, data=exc.payload()),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_response("서버 내부 오류가 발생했습니다."),
        )
