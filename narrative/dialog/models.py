"""
Dialog data model.

Definitions are authored data only. They are frozen after load, so the
same instance can be shared by every reader of the cache; any resolved
or presentation state (filtered options, revealed text) lives elsewhere.

Document field names are the authored camelCase keys and are mapped to
snake_case attributes through aliases.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class DialogModel(BaseModel):
    """Base for every dialog model: immutable, populated by alias or name."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _as_text(value: Any) -> Any:
    """Numbers authored for string fields are kept as their text."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class Condition(DialogModel):
    """
    A single predicate over game state.

    Attributes:
        kind: Predicate kind tag (``TAG_CHECK``, ``ITEM_OWNED``)
        target: Tag id or numeric item id the predicate looks up
        value: Comparison operand as authored
        operator: Comparison operator name or symbol
    """
    kind: Optional[str] = Field(default=None, alias="type")
    target: Optional[str] = Field(default=None, alias="param")
    value: Optional[str] = None
    operator: Optional[str] = None

    @field_validator("kind", "target", "value", "operator", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)


class InitialCondition(DialogModel):
    condition: Optional[Condition] = None
    dialog_id: int = Field(alias="dialogId")


class ConditionalNext(DialogModel):
    condition: Optional[Condition] = None
    next_id: int = Field(alias="nextId")


class LineEvent(DialogModel):
    """
    A side effect run after a line is fully revealed.

    ``use_condition`` left unset means the condition gates the event when
    one is authored; an explicit ``false`` disables the gate.
    """
    kind: str = Field(default="", alias="event_type")
    param1: str = ""
    param2: str = ""
    use_condition: Optional[bool] = Field(default=None, alias="useCondition")
    condition: Optional[Condition] = None

    @field_validator("kind", "param1", "param2", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return "" if value is None else _as_text(value)

    @property
    def gate(self) -> Optional[Condition]:
        if self.use_condition is False:
            return None
        return self.condition


class DialogOption(DialogModel):
    text: str = ""
    next_id: int = Field(default=-1, alias="nextId")
    condition: Optional[Condition] = None
    fail_text: Optional[str] = Field(default=None, alias="failText")
    conditional_next: tuple[ConditionalNext, ...] = Field(default=(), alias="conditionalNextDialogs")

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def has_fail_text(self) -> bool:
        return bool(self.fail_text)


class DialogNode(DialogModel):
    id: int
    next_id: int = Field(default=-1, alias="nextId")
    expression_id: int = Field(default=0, alias="expressionId")
    text: str = ""
    events: tuple[LineEvent, ...] = ()
    next_conditions: tuple[ConditionalNext, ...] = Field(default=(), alias="nextDialogConditions")
    options: tuple[DialogOption, ...] = ()

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def has_options(self) -> bool:
        return len(self.options) > 0


class DialogDefinition(DialogModel):
    """The full authored document for one dialog id in one language."""

    name: str = Field(default="", alias="dialogName")
    version: str = ""
    description: str = ""
    initial_conditions: tuple[InitialCondition, ...] = Field(default=(), alias="initialDialogConditions")
    default_initial_id: int = Field(default=1, alias="defaultInitialDialogId")
    nodes: tuple[DialogNode, ...] = Field(alias="dialogs")

    @field_validator("name", "version", "description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return "" if value is None else _as_text(value)

    @model_validator(mode="after")
    def check_unique_ids(self) -> DialogDefinition:
        seen: set[int] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate dialog node id {node.id}")
            seen.add(node.id)
        return self

    def get_node(self, node_id: int) -> Optional[DialogNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_document(self) -> dict[str, Any]:
        """Dump back to the authored document shape."""
        return self.model_dump(mode="json", by_alias=True)
