from pydantic import BaseModel


# ─── Error Detail (per field) ──────────────────────────────────────────────────
class ErrorDetail(BaseModel):
    field: str
    message: str


# ─── Error Body ───────────────────────────────────────────────────────────────
class ErrorBody(BaseModel):
    code: str
    details: list[ErrorDetail] | None = None
    field: str | None = None


# ─── Error Response ───────────────────────────────────────────────────────────
class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: ErrorBody


def error_responses(*status_codes: int) -> dict:
    """OpenAPI `responses=` entries documenting the error envelope."""
    return {code: {"model": ErrorResponse} for code in status_codes}


def error_body(message: str, code: str, details: list | None = None, field: str | None = None) -> dict:
    """Return the standardized error dict (used by the exception handlers)."""
    return {
        "success": False,
        "message": message,
        "error": {"code": code, "details": details, "field": field},
    }
