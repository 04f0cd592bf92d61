"""Error taxonomy of the API and the handlers that render it as JSON"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.response_builders import format_validation_errors


class APIError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(APIError):
    status_code = 422

    def __init__(self, errors: Dict[str, Any], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        return {"status": False, "message": self.message, "errors": self.errors}


class AuthError(APIError):
    status_code = 401

    def __init__(self, message: str = "Unauthenticated."):
        super().__init__(message)


class NotFoundError(APIError):
    status_code = 404

    def __init__(self, resource_name: str = "User"):
        super().__init__(f"{resource_name} not found")


class StoreError(APIError):
    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        self.error = error
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        body = {"status": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(format_validation_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
