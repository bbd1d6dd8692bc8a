from __future__ import annotations

from pydantic import BaseModel


class MutationOutput(BaseModel):
    success: bool
    error: str | None = None
