"""
Gemini-backed language model calls for chat replies, image analysis,
task generation and strain recommendations.
"""

from __future__ import annotations

import logging
import time
from typing import List, Literal, Optional, Sequence, Type, TypeVar, Union

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from crowelogic import prompts
from crowelogic.errors import GenerationFailed
from crowelogic.records import AnalysisType, Message, MessageDraft

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
MAX_OUTPUT_TOKENS = 4000

T = TypeVar("T", bound=BaseModel)

# Gemini calls the assistant side of a conversation "model".
GEMINI_ROLES = {"user": "user", "assistant": "model"}


class GeneratedModel(BaseModel):
    """Structured model output, camelCase on the wire like stored records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeneratedTask(GeneratedModel):
    title: str
    description: str
    priority: Literal["low", "medium", "high"]
    estimated_time: str


class DailyTaskPlan(GeneratedModel):
    tasks: List[GeneratedTask]
    notes: Optional[str] = None


class RecommendedConditions(GeneratedModel):
    temperature: str
    humidity: str
    light: str
    co2: str


class StrainRecommendation(GeneratedModel):
    name: str
    scientific_name: str
    difficulty: Literal["beginner", "intermediate", "advanced"]
    yield_potential: Literal["low", "medium", "high"]
    colonization_time: str
    fruiting_time: str
    substrates: List[str]
    optimal_conditions: RecommendedConditions
    notes: str


class StrainRecommendations(GeneratedModel):
    recommendations: List[StrainRecommendation]
    explanation: str


def _truncate(text: str, limit: int = 200) -> str:
    return (text[:limit] + "...") if len(text) > limit else text


class Assistant:
    """
    Thin wrapper over the Gemini async client.

    Every failure (missing key, API error, empty or malformed output) is
    raised as GenerationFailed.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key
        self.model = model
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GenerationFailed("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(self, contents, config: dict) -> types.GenerateContentResponse:
        client = self._get_client()
        start_time = time.time()
        try:
            response = await client.aio.models.generate_content(
                model=self.model, contents=contents, config=config
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            logger.exception("Gemini call failed")
            raise GenerationFailed(str(exc)) from exc
        logger.info("Gemini call took %.2fs", time.time() - start_time)
        return response

    async def generate_text(
        self, system_prompt: str, messages: Sequence[Union[Message, MessageDraft]]
    ) -> str:
        """Reply to a conversation. System messages join the system instruction."""
        instructions = [system_prompt]
        contents = []
        for message in messages:
            if message.role == "system":
                instructions.append(message.content)
                continue
            contents.append(
                types.Content(
                    role=GEMINI_ROLES[message.role],
                    parts=[types.Part(text=message.content)],
                )
            )
        if not contents:
            raise GenerationFailed("No user or assistant messages to reply to")

        response = await self._generate(
            contents,
            {
                "system_instruction": "\n\n".join(instructions),
                "max_output_tokens": MAX_OUTPUT_TOKENS,
            },
        )
        if not response.text:
            raise GenerationFailed("Gemini returned an empty response")
        return response.text

    async def generate_object(self, schema: Type[T], prompt: str) -> T:
        """Generate structured output validated against `schema`."""
        logger.info("Calling Gemini with schema %s, prompt: '%s'", schema.__name__, _truncate(prompt))
        response = await self._generate(
            prompt,
            {
                "response_mime_type": "application/json",
                "response_schema": schema,
                "temperature": 0,
            },
        )
        if isinstance(response.parsed, schema):
            return response.parsed
        if not response.text:
            raise GenerationFailed("Gemini returned an empty response")
        try:
            return schema.model_validate_json(response.text)
        except ValidationError as exc:
            raise GenerationFailed(f"Response did not match {schema.__name__}") from exc

    async def chat_reply(self, messages: Sequence[Message]) -> str:
        return await self.generate_text(prompts.SYSTEM_PROMPT, messages)

    async def analyze_image(self, analysis_type: AnalysisType, image_url: str) -> str:
        prompt = prompts.make_image_analysis_prompt(analysis_type, image_url)
        return await self.generate_text(
            prompts.SYSTEM_PROMPT, [MessageDraft(role="user", content=prompt)]
        )

    async def generate_daily_tasks(self, farm_context: str) -> DailyTaskPlan:
        return await self.generate_object(
            DailyTaskPlan, prompts.make_daily_tasks_prompt(farm_context)
        )

    async def recommend_strains(
        self, farm_context: str, goals: str
    ) -> StrainRecommendations:
        return await self.generate_object(
            StrainRecommendations,
            prompts.make_strain_recommendation_prompt(farm_context, goals),
        )
