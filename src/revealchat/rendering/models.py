"""Data models for message rendering.

Hides how a classified message is represented between the classifier,
the renderer and the presentation layer.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Kind of a contiguous span of message text."""

    PLAIN = "plain"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    QA = "qa"
    NOTE_BLOCK = "note_block"
    CHECKLIST = "checklist"
    DIALOGUE = "dialogue"
    HORIZONTAL_RULE = "horizontal_rule"
    MATH_FORMULA = "math_formula"
    DEFINITION_LIST = "definition_list"
    STEP_BY_STEP = "step_by_step"
    TIMELINE = "timeline"
    ASCII_CHART = "ascii_chart"
    COLLAPSIBLE = "collapsible"


class NoteKind(str, Enum):
    """Flavour of a note block."""

    NOTE = "note"
    TIP = "tip"
    WARNING = "warning"
    IMPORTANT = "important"


class ContentSection(BaseModel):
    """A typed span of message text produced by the classifier."""

    model_config = ConfigDict(frozen=True)

    type: ContentType = Field(description="Section type")
    text: str = Field(description="Trimmed raw text belonging to this section")
    language: str | None = Field(
        default=None,
        description="Fence language hint (code blocks only)"
    )
    note_kind: NoteKind | None = Field(
        default=None,
        description="Note flavour (note blocks only)"
    )
    title: str | None = Field(
        default=None,
        description="Summary title (collapsible sections only)"
    )


class RenderRow(BaseModel):
    """One visual row of a line-oriented section."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Row body with the type-specific prefix stripped")
    label: str | None = Field(
        default=None,
        description="Speaker, term or date shown before the body"
    )
    marker: str | None = Field(
        default=None,
        description="Row role, e.g. 'question' or 'answer'"
    )
    checked: bool | None = Field(
        default=None,
        description="Checklist state"
    )
    number: int | None = Field(
        default=None,
        description="Sequential step number"
    )


class RenderNode(BaseModel):
    """Presentation-ready description of one section.

    Pure data: the UI layer decides how each node looks.
    """

    model_config = ConfigDict(frozen=True)

    type: ContentType
    text: str = ""
    language: str | None = None
    note_kind: NoteKind | None = None
    title: str | None = None
    headers: list[str] = Field(default_factory=list)
    table_rows: list[list[str]] = Field(default_factory=list)
    rows: list[RenderRow] = Field(default_factory=list)

    @property
    def is_table(self) -> bool:
        return self.type == ContentType.TABLE and bool(self.headers)
