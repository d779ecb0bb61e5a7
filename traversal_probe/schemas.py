"""Pydantic schemas for the two requests the probe sends."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, ConfigDict, constr, model_validator

Token = constr(pattern=r"^[0-9a-z]+$")

TRAVERSAL_PREFIX = "../"
FILE_SUFFIX = ".txt"
FILE_ROUTE = "/file"


class UploadForm(BaseModel):
    """Form body of the write attempt against ``POST /file``."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: Token

    @model_validator(mode="after")
    def _name_targets_parent_directory(self) -> "UploadForm":
        expected = f"{TRAVERSAL_PREFIX}{self.content}{FILE_SUFFIX}"
        if self.name != expected:
            raise ValueError(f"name must be {expected!r}, got {self.name!r}")
        return self

    def as_form(self) -> Dict[str, str]:
        # Field order matters for the encoded body: name first, then content.
        return {"name": self.name, "content": self.content}


class ReadTarget(BaseModel):
    """Path of the read attempt, a sibling of the traversal write."""

    model_config = ConfigDict(frozen=True)

    token: Token

    @property
    def filename(self) -> str:
        return f"{self.token}{FILE_SUFFIX}"

    @property
    def path(self) -> str:
        return f"{FILE_ROUTE}/{self.filename}"


def build_upload_form(token: str) -> UploadForm:
    return UploadForm(name=f"{TRAVERSAL_PREFIX}{token}{FILE_SUFFIX}", content=token)


def build_read_target(token: str) -> ReadTarget:
    return ReadTarget(token=token)
