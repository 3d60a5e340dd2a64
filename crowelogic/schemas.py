"""
Pydantic schemas for the FastAPI routes.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from crowelogic.assistant import StrainRecommendations
from crowelogic.records import (
    Analysis,
    AnalysisType,
    Chat,
    EnvironmentalReading,
    Farm,
    FarmPatch,
    Message,
    Strain,
    Task,
    TaskPatch,
    TaskPriority,
    TaskStatus,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(ApiModel):
    chat_id: Optional[str] = None
    content: str = Field(..., min_length=1)


class ChatTurnResponse(ApiModel):
    chat_id: str
    message: Message
    reply: Message


class ChatListResponse(ApiModel):
    chats: List[Chat]


class ChatDetailResponse(ApiModel):
    chat: Chat


class TaskCreateRequest(ApiModel):
    generate: bool = False
    farm_context: str = ""
    title: Optional[str] = None
    description: str = ""
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[int] = None
    farm_id: Optional[str] = None


class TaskUpdateRequest(TaskPatch):
    task_id: str


class TaskResponse(ApiModel):
    task: Task


class TaskListResponse(ApiModel):
    tasks: List[Task]
    notes: Optional[str] = None


class FarmCreateRequest(ApiModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    location: str = ""
    size: str = ""


class FarmUpdateRequest(FarmPatch):
    farm_id: str


class FarmResponse(ApiModel):
    farm: Farm


class FarmListResponse(ApiModel):
    farms: List[Farm]


class StrainResponse(ApiModel):
    strain: Strain


class ReadingListResponse(ApiModel):
    readings: List[EnvironmentalReading]


class AnalyzeRequest(ApiModel):
    image_url: str = Field(..., min_length=1)
    type: AnalysisType
    farm_id: Optional[str] = None
    strain_id: Optional[str] = None


class AnalysisResponse(ApiModel):
    analysis: Analysis


class AnalysisListResponse(ApiModel):
    analyses: List[Analysis]


class StrainRecommendRequest(ApiModel):
    farm_context: str = ""
    goals: str = ""


class StrainRecommendResponse(ApiModel):
    recommendations: StrainRecommendations


class SuccessResponse(ApiModel):
    success: bool = True
