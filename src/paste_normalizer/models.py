# -*- coding: utf-8 -*-
"""
Pydantic data models for the API.
"""
from pydantic import BaseModel, Field

from .config import settings


class NormalizeRequest(BaseModel):
    """Normalization request schema."""

    html: str = Field(
        ...,
        max_length=settings.MAX_INPUT_CHARS,
        description="Pasted markup (or plain text) to normalize",
    )
    mode: str | None = Field(
        default=None,
        description="Mode profile (plain, editorial, commerce, custom); server default when omitted",
    )
    overrides: dict[str, bool] | None = Field(
        default=None,
        description="Per-transform on/off values layered over the mode defaults",
    )
    plain_text: bool = Field(
        default=False,
        description="Treat html as plain text: one paragraph per non-empty line",
    )


class NormalizeResponse(BaseModel):
    """Normalization response schema."""

    html: str
    mode: str
    success: bool
    fallback: bool = False
    steps_applied: list[str] = Field(default_factory=list)
    content_length: int = 0
    duration_ms: int = 0


class ValidateRequest(BaseModel):
    """Validation request schema."""

    html: str = Field(..., max_length=settings.MAX_INPUT_CHARS)
    mode: str | None = None
    overrides: dict[str, bool] | None = None


class CheckResultResponse(BaseModel):
    """One feature check."""

    feature: str
    passed: bool
    message: str
    details: list[str] = Field(default_factory=list)


class ValidationResponse(BaseModel):
    """Validation report schema."""

    mode: str
    ok: bool
    total: int
    passed: int
    failed: int
    success_rate: float
    results: list[CheckResultResponse] = Field(default_factory=list)


class ModeInfo(BaseModel):
    """A mode profile and the transforms it enables by default."""

    name: str
    transforms: list[str]
    aliases: list[str] = Field(default_factory=list)


class ModesResponse(BaseModel):
    """Available modes and transforms."""

    default_mode: str
    modes: list[ModeInfo]
    transforms: list[str]


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    version: str
    parser_ready: bool
    default_mode: str
