"""
HTTP routes for the Crowe Logic API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from crowelogic.assistant import Assistant
from crowelogic.config import Settings, get_settings
from crowelogic.dependencies import get_assistant, get_store, get_user_id
from crowelogic.errors import ChatNotFound, FarmNotFound
from crowelogic.records import (
    AnalysisDraft,
    EnvironmentalSample,
    FarmDraft,
    FarmPatch,
    MessageDraft,
    StrainDraft,
    TaskDraft,
    TaskPatch,
)
from crowelogic.schemas import (
    AnalysisListResponse,
    AnalysisResponse,
    AnalyzeRequest,
    ChatDetailResponse,
    ChatListResponse,
    ChatRequest,
    ChatTurnResponse,
    FarmCreateRequest,
    FarmListResponse,
    FarmResponse,
    FarmUpdateRequest,
    ReadingListResponse,
    StrainRecommendRequest,
    StrainRecommendResponse,
    StrainResponse,
    SuccessResponse,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
)
from crowelogic.store import Store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatTurnResponse)
async def chat(
    payload: ChatRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
    assistant: Assistant = Depends(get_assistant),
):
    """
    Append the user's message, generate a reply from the stored history and
    append that too. Creates the chat when no chatId is given.
    """
    chat_id = payload.chat_id
    if not chat_id:
        chat_id = (await store.chats.create_chat(user_id)).id

    message = await store.chats.add_message_to_chat(
        user_id, chat_id, MessageDraft(role="user", content=payload.content)
    )
    current = await store.chats.get_chat(user_id, chat_id)
    if current is None:
        raise ChatNotFound(chat_id)

    reply_text = await assistant.chat_reply(current.messages)
    reply = await store.chats.add_message_to_chat(
        user_id, chat_id, MessageDraft(role="assistant", content=reply_text)
    )

    response.headers["X-Chat-Id"] = chat_id
    return ChatTurnResponse(chat_id=chat_id, message=message, reply=reply)


@router.get("/chats", response_model=ChatListResponse)
async def list_chats(
    user_id: str = Depends(get_user_id), store: Store = Depends(get_store)
):
    return ChatListResponse(chats=await store.chats.get_user_chats(user_id))


@router.get("/chats/{chat_id}", response_model=ChatDetailResponse)
async def get_chat(
    chat_id: str,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
):
    found = await store.chats.get_chat(user_id, chat_id)
    if found is None:
        raise ChatNotFound(chat_id)
    return ChatDetailResponse(chat=found)


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    user_id: str = Depends(get_user_id), store: Store = Depends(get_store)
):
    return TaskListResponse(tasks=await store.tasks.get_user_tasks(user_id))


@router.post("/tasks", response_model=TaskListResponse | TaskResponse)
async def create_tasks(
    payload: TaskCreateRequest,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
    assistant: Assistant = Depends(get_assistant),
):
    """Create one task, or with `generate` set, today's tasks from the model."""
    if payload.generate:
        plan = await assistant.generate_daily_tasks(payload.farm_context)
        tasks = []
        for generated in plan.tasks:
            tasks.append(
                await store.tasks.create_task(
                    TaskDraft(
                        title=generated.title,
                        description=generated.description,
                        status="pending",
                        priority=generated.priority,
                        user_id=user_id,
                        farm_id=payload.farm_id,
                    )
                )
            )
        logger.info("Generated %d tasks for %s", len(tasks), user_id)
        return TaskListResponse(tasks=tasks, notes=plan.notes)

    if not payload.title:
        raise HTTPException(status_code=422, detail="title is required")
    task = await store.tasks.create_task(
        TaskDraft(
            **payload.model_dump(exclude={"generate", "farm_context"}),
            user_id=user_id,
        )
    )
    return TaskResponse(task=task)


@router.patch("/tasks", response_model=SuccessResponse)
async def update_task(
    payload: TaskUpdateRequest,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
):
    patch = TaskPatch.model_validate(
        payload.model_dump(exclude={"task_id"}, exclude_unset=True)
    )
    await store.tasks.update_task(user_id, payload.task_id, patch)
    return SuccessResponse()


@router.get("/farms", response_model=FarmListResponse)
async def list_farms(
    user_id: str = Depends(get_user_id), store: Store = Depends(get_store)
):
    return FarmListResponse(farms=await store.farms.get_user_farms(user_id))


@router.post("/farms", response_model=FarmResponse)
async def create_farm(
    payload: FarmCreateRequest,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
):
    farm = await store.farms.create_farm(
        FarmDraft(**payload.model_dump(), user_id=user_id)
    )
    return FarmResponse(farm=farm)


@router.patch("/farms", response_model=SuccessResponse)
async def update_farm(
    payload: FarmUpdateRequest,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
):
    patch = FarmPatch.model_validate(
        payload.model_dump(exclude={"farm_id"}, exclude_unset=True)
    )
    await store.farms.update_farm(user_id, payload.farm_id, patch)
    return SuccessResponse()


@router.post("/farms/{farm_id}/strains", response_model=StrainResponse)
async def add_strain(
    farm_id: str,
    payload: StrainDraft,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
):
    strain = await store.farms.add_strain_to_farm(user_id, farm_id, payload)
    return StrainResponse(strain=strain)


@router.post("/farms/{farm_id}/environment", response_model=FarmResponse)
async def record_environment(
    farm_id: str,
    payload: EnvironmentalSample,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
):
    await store.observations.save_environmental_data(user_id, farm_id, payload)
    farm = await store.farms.get_farm(user_id, farm_id)
    return FarmResponse(farm=farm)


@router.get("/farms/{farm_id}/environment", response_model=ReadingListResponse)
async def environment_history(
    farm_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if await store.farms.get_farm(user_id, farm_id) is None:
        raise FarmNotFound(farm_id)
    readings = await store.observations.get_environmental_history(
        farm_id, limit=limit or settings.env_history_default_limit
    )
    return ReadingListResponse(readings=readings)


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    payload: AnalyzeRequest,
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
    assistant: Assistant = Depends(get_assistant),
):
    results = await assistant.analyze_image(payload.type, payload.image_url)
    analysis = await store.observations.save_analysis(
        AnalysisDraft(
            type=payload.type,
            image_url=payload.image_url,
            results=results,
            user_id=user_id,
            farm_id=payload.farm_id,
            strain_id=payload.strain_id,
        )
    )
    return AnalysisResponse(analysis=analysis)


@router.get("/analyses", response_model=AnalysisListResponse)
async def list_analyses(
    limit: Optional[int] = Query(None, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    analyses = await store.observations.get_user_analyses(
        user_id, limit=limit or settings.analyses_default_limit
    )
    return AnalysisListResponse(analyses=analyses)


@router.post("/strains/recommend", response_model=StrainRecommendResponse)
async def recommend_strains(
    payload: StrainRecommendRequest,
    user_id: str = Depends(get_user_id),
    assistant: Assistant = Depends(get_assistant),
):
    recommendations = await assistant.recommend_strains(
        payload.farm_context, payload.goals
    )
    return StrainRecommendResponse(recommendations=recommendations)
