from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NoticeNotifier(BaseModel):
    name: str = "faultline"
    version: str


class NoticeCause(BaseModel):
    class_name: str = Field(serialization_alias="class")
    message: str


class NoticeError(BaseModel):
    class_name: str = Field(serialization_alias="class")
    message: str
    backtrace: list[str]
    causes: list[NoticeCause] = Field(default_factory=list)


class NoticeServer(BaseModel):
    environment_name: str
    hostname: str
    project_root: str
    framework: str | None = None


class Notice(BaseModel):
    id: str
    occurred_at: datetime
    notifier: NoticeNotifier
    error: NoticeError
    request: dict[str, Any]
    context: dict[str, Any]
    server: NoticeServer
