"""Response bodies shared by the create-token endpoints."""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.chain.errors import ErrorKind, LauncherError
from src.launcher.service import LaunchResult


class CreateTokenResponse(BaseModel):
    success: bool = True
    signature: str
    mintAddress: str


class ErrorResponse(BaseModel):
    error: str


def error_response(kind: ErrorKind | None, message: str) -> JSONResponse:
    code = (
        status.HTTP_400_BAD_REQUEST
        if kind == ErrorKind.VALIDATION
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(status_code=code, content=ErrorResponse(error=message).model_dump())


def launch_response(result: LaunchResult) -> CreateTokenResponse | JSONResponse:
    if not result.ok or not result.signature or not result.mint_address:
        return error_response(result.error_kind, result.detail or "Token creation failed")
    return CreateTokenResponse(signature=result.signature, mintAddress=result.mint_address)


def launcher_error_response(e: LauncherError) -> JSONResponse:
    return error_response(e.kind, e.message)
