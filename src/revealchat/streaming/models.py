from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RevealStatus(str, Enum):
    """Lifecycle state of a reveal session."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELED = "canceled"

    @property
    def is_finished(self) -> bool:
        return self in (RevealStatus.COMPLETED, RevealStatus.CANCELED)


class RevealToken(BaseModel):
    """Atomic unit of text appended during one reveal tick."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Exact substring to append to the displayed prefix")

    def __str__(self) -> str:
        return self.text
