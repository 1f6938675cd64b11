from __future__ import annotations

from pydantic import BaseModel, Field


class ConvertRequest(BaseModel):
    content: str
    file_name: str
    document_path: str | None = None


class ImageInstruction(BaseModel):
    source: str
    destination: str
    name: str


class ConvertResponse(BaseModel):
    text: str
    tags: list[str]
    images: list[ImageInstruction]
    warnings: list[str]


class SyncRequest(BaseModel):
    paths: list[str] = Field(default_factory=list)


class SyncedDocument(BaseModel):
    name: str
    output_path: str
    copied: list[str]
    skipped: list[str]
    warnings: list[str]


class SyncSummary(BaseModel):
    total: int
    successes: int
    failures: int
    warnings: dict[str, int]


class SyncResponse(BaseModel):
    results: list[SyncedDocument]
    summary: SyncSummary
    errors: list[str]
    message: str
