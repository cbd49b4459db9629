"""Pydantic response models for API endpoints."""

from pydantic import BaseModel


class SaveResult(BaseModel):
    saved: bool


class BackupResult(BaseModel):
    archived: str | None = None
