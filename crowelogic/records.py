"""
Stored record types, creation drafts and partial patches.

Records serialize with camelCase keys so the JSON documents in the store
match what the web client reads. Patches carry only the fields a caller
explicitly set; `apply_patch` merges them shallowly over a record.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["user", "assistant", "system"]
TaskStatus = Literal["pending", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
AnalysisType = Literal["mycelium", "substrate", "fruiting", "contamination"]

NEW_CHAT_TITLE = "New Chat"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex


class Record(BaseModel):
    """Base for everything written to the key-value store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def as_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Message(Record):
    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    content: str
    created_at: int


class Chat(Record):
    id: str
    title: str = NEW_CHAT_TITLE
    messages: List[Message] = Field(default_factory=list)
    created_at: int
    updated_at: int
    user_id: str


class Task(Record):
    id: str
    title: str
    description: str = ""
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[int] = None
    created_at: int
    updated_at: int
    user_id: str
    farm_id: Optional[str] = None


class OptimalConditions(Record):
    temperature: str = ""
    humidity: str = ""
    light: str = ""
    co2: str = ""


class Strain(Record):
    id: str
    name: str
    type: str = ""
    description: str = ""
    growth_rate: str = ""
    preferred_substrate: str = ""
    optimal_conditions: OptimalConditions = Field(default_factory=OptimalConditions)
    created_at: int
    farm_id: str


class EnvironmentalReading(Record):
    temperature: float
    humidity: float
    co2: float
    light: float
    timestamp: int


class Farm(Record):
    id: str
    name: str
    description: str = ""
    location: str = ""
    size: str = ""
    strains: List[Strain] = Field(default_factory=list)
    environmental_data: Optional[EnvironmentalReading] = None
    created_at: int
    updated_at: int
    user_id: str


class Analysis(Record):
    id: str
    type: AnalysisType
    image_url: str
    results: Any = None
    created_at: int
    user_id: str
    farm_id: Optional[str] = None
    strain_id: Optional[str] = None


# Creation payloads: the record minus server-assigned fields.


class MessageDraft(Record):
    role: Role
    content: str


class TaskDraft(Record):
    title: str
    description: str = ""
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[int] = None
    user_id: str
    farm_id: Optional[str] = None


class FarmDraft(Record):
    name: str
    description: str = ""
    location: str = ""
    size: str = ""
    user_id: str


class StrainDraft(Record):
    name: str
    type: str = ""
    description: str = ""
    growth_rate: str = ""
    preferred_substrate: str = ""
    optimal_conditions: OptimalConditions = Field(default_factory=OptimalConditions)


class EnvironmentalSample(Record):
    temperature: float
    humidity: float
    co2: float
    light: float


class AnalysisDraft(Record):
    type: AnalysisType
    image_url: str
    results: Any = None
    user_id: str
    farm_id: Optional[str] = None
    strain_id: Optional[str] = None


# Partial patches: one optional field per mutable attribute.


class ChatPatch(Record):
    title: Optional[str] = None
    messages: Optional[List[Message]] = None


class TaskPatch(Record):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[int] = None
    farm_id: Optional[str] = None


class FarmPatch(Record):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    size: Optional[str] = None
    strains: Optional[List[Strain]] = None
    environmental_data: Optional[EnvironmentalReading] = None


R = TypeVar("R", bound=Record)


def apply_patch(record: R, patch: Record) -> R:
    """
    Return a copy of `record` with every field explicitly set on `patch`
    overwritten. The merge is shallow: a list in the patch replaces the
    stored list. An explicit None only clears fields whose stored default
    is None; for anything else (title, messages, strains) it counts as absent.
    """
    fields = type(record).model_fields
    updates: dict[str, Any] = {}
    for name in patch.model_fields_set:
        if name not in fields:
            continue
        value = getattr(patch, name)
        if value is None:
            info = fields[name]
            if info.is_required() or info.default is not None:
                continue
        updates[name] = value
    return record.model_copy(update=updates)
