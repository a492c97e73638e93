from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DeployMode = Literal["upload", "replace"]
DeployStatus = Literal["completed", "failed", "skipped"]


class DeployResult(BaseModel):
    # "failed" means Theme Kit reported an error that was logged, not raised.
    mode: DeployMode = "upload"
    files: list[str] = Field(default_factory=list)
    status: DeployStatus
    error: str | None = None
    overlapped: bool = False

    @property
    def transferred(self) -> bool:
        return self.status == "completed"
