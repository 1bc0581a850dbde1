import base64
import json
import logging
import re
from typing import Any, AsyncIterator, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from zenithfit.core.config import settings
from zenithfit.schemas.nutrition import FoodAnalysis
from zenithfit.schemas.profile import UserProfile
from zenithfit.schemas.workout import MUSCLE_GROUPS, GeneratedSession, WorkoutSession

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


class AIServiceError(Exception):
    """Any failure talking to the generative AI backend (network, quota, bad payload)."""


PLAN_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "description": "A list of 7 daily sessions representing a weekly schedule.",
    "items": {
        "type": "OBJECT",
        "properties": {
            "dayNumber": {"type": "INTEGER"},
            "name": {"type": "STRING"},
            "isRestDay": {"type": "BOOLEAN"},
            "exercises": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "name": {"type": "STRING"},
                        "muscleGroup": {"type": "STRING"},
                        "targetSets": {"type": "INTEGER"},
                        "targetReps": {"type": "STRING"},
                        "restTime": {"type": "INTEGER"},
                    },
                },
            },
        },
        "required": ["dayNumber", "name", "isRestDay", "exercises"],
    },
}

FOOD_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "mealName": {"type": "STRING"},
        "calories": {"type": "INTEGER"},
        "protein": {"type": "INTEGER"},
        "fat": {"type": "INTEGER"},
        "carbs": {"type": "INTEGER"},
    },
    "required": ["mealName", "calories", "protein", "fat", "carbs"],
}


def build_plan_prompt(profile: UserProfile) -> str:
    return f"""
    Create a highly personalized weekly workout routine for a user with the following profile:
    - Name: {profile.name}
    - Level: {profile.level.value}
    - Goal: {profile.goal.value}
    - Training Format Preference: {profile.current_format}
    - Frequency: {profile.days_per_week} days per week
    - Equipment: {profile.equipment}
    - Constraints: {profile.constraints or 'None'}

    The output should be a list of daily sessions for one week (7 days).
    Mark rest days explicitly based on the user's frequency.
    For exercise days, provide specific exercises tailored to their format ({profile.current_format}).
    IMPORTANT: For each exercise, strictly categorize the 'muscleGroup' into one of: {', '.join(repr(g) for g in MUSCLE_GROUPS)}.
    """


def build_coach_prompt(profile: UserProfile) -> str:
    return (
        "You are Zenith, a world-class personal trainer and holistic coach.\n"
        "Talk like a human, not a robot. Be concise, direct, and supportive. Use natural language, "
        "contractions, and occasionally casual fillers like \"Listen,\" \"Look,\" or \"Got it.\"\n"
        "Avoid robotic lists unless requested. Focus on science-based, practical advice.\n"
        f"The user's goal is {profile.goal.value} and they are at the {profile.level.value} level.\n"
        f"Their current training format is {profile.current_format}.\n"
        "Respond as if we're in a real conversation."
    )


def _text_part(text: str) -> Dict[str, str]:
    return {"text": text}


def _extract_text(payload: Dict[str, Any]) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(part.get("text", "") for part in parts)


class AIService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.image_model = image_model or settings.GEMINI_IMAGE_MODEL
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self._transport = transport

        logger.info("Gemini AI service initialized, API key %s", "present" if self.api_key else "NOT FOUND")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _url(self, model: str, method: str) -> str:
        return f"{self.base_url}/models/{model}:{method}"

    def _check_configured(self) -> None:
        if not self.api_key:
            raise AIServiceError("AI service is not configured, set GEMINI_API_KEY")

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        message = f"Gemini API error: {response.status_code}"
        try:
            error = response.json().get("error", {})
            if error.get("message"):
                message += f" - {error['message']}"
        except ValueError:
            message += f" - {response.text[:200]}"
        return message

    async def _generate(
        self,
        contents: List[Dict[str, Any]],
        generation_config: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._check_configured()
        body: Dict[str, Any] = {"contents": contents}
        if generation_config:
            body["generationConfig"] = generation_config

        try:
            async with self._client() as client:
                response = await client.post(
                    self._url(model or self.model, "generateContent"),
                    params={"key": self.api_key},
                    json=body,
                )
        except httpx.TimeoutException as e:
            raise AIServiceError("Gemini API timed out") from e
        except httpx.HTTPError as e:
            raise AIServiceError(f"Gemini API connection failed: {e}") from e

        if response.status_code != 200:
            raise AIServiceError(self._error_message(response))
        try:
            return response.json()
        except ValueError as e:
            raise AIServiceError("Gemini API returned a non-JSON body") from e

    async def _generate_json(self, contents: List[Dict[str, Any]], schema: Dict[str, Any]) -> Any:
        payload = await self._generate(
            contents,
            generation_config={"responseMimeType": "application/json", "responseSchema": schema},
        )
        text = _extract_text(payload)
        if not text:
            raise AIServiceError("Gemini API returned an empty answer")
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise AIServiceError("Gemini API returned malformed JSON") from e

    async def generate_workout_plan(self, profile: UserProfile) -> List[WorkoutSession]:
        """Ask for a 7 day routine and give every session and exercise a fresh id."""
        raw = await self._generate_json(
            [{"role": "user", "parts": [_text_part(build_plan_prompt(profile))]}],
            PLAN_RESPONSE_SCHEMA,
        )
        try:
            generated = [GeneratedSession.model_validate(item) for item in raw]
        except (ValidationError, TypeError) as e:
            raise AIServiceError(f"Workout plan does not match the expected shape: {e}") from e

        sessions = []
        seen_days = set()
        for session in sorted((g.to_session() for g in generated), key=lambda s: s.day_number):
            if session.day_number in seen_days:
                logger.warning("Generated plan repeats day %d, keeping the first session", session.day_number)
                continue
            seen_days.add(session.day_number)
            sessions.append(session)
        if sorted(seen_days) != list(range(1, 8)):
            logger.warning("Generated plan covers days %s instead of 1-7", sorted(seen_days))
        logger.info("Generated plan with %d sessions for %s", len(sessions), profile.name)
        return sessions

    async def analyze_food_image(self, image: Union[bytes, str], mime_type: str = "image/jpeg") -> FoodAnalysis:
        if isinstance(image, bytes):
            data = base64.b64encode(image).decode("ascii")
        else:
            data = DATA_URL_PREFIX.sub("", image)

        prompt = ("Analyze this food image. Identify the meal name and estimate total calories, "
                  "protein (g), fat (g), and carbs (g).")
        raw = await self._generate_json(
            [{
                "role": "user",
                "parts": [
                    {"inlineData": {"mimeType": mime_type, "data": data}},
                    _text_part(prompt),
                ],
            }],
            FOOD_RESPONSE_SCHEMA,
        )
        try:
            return FoodAnalysis.model_validate(raw)
        except ValidationError as e:
            raise AIServiceError(f"Food analysis does not match the expected shape: {e}") from e

    async def generate_food_image(self, description: str) -> Optional[str]:
        """Render a photo for a meal. Returns a data URL, or None when no image came back."""
        payload = await self._generate(
            [{
                "role": "user",
                "parts": [_text_part(
                    f"A realistic, high-quality photograph of a delicious plate of {description} on a clean table."
                )],
            }],
            generation_config={"responseModalities": ["TEXT", "IMAGE"]},
            model=self.image_model,
        )
        try:
            parts = payload["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return None
        for part in parts:
            inline = part.get("inlineData")
            if inline and inline.get("data"):
                return f"data:{inline.get('mimeType', 'image/png')};base64,{inline['data']}"
        return None

    async def stream_coach_reply(
        self,
        profile: UserProfile,
        message: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> AsyncIterator[str]:
        """Yield the coach's answer chunk by chunk as server-sent events arrive."""
        self._check_configured()
        contents = [{"role": "user", "parts": [_text_part(build_coach_prompt(profile))]}]
        contents += [{"role": h["role"], "parts": [_text_part(h["text"])]} for h in history or []]
        contents.append({"role": "user", "parts": [_text_part(message)]})

        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    self._url(self.model, "streamGenerateContent"),
                    params={"alt": "sse", "key": self.api_key},
                    json={"contents": contents},
                ) as response:
                    if response.status_code != 200:
                        await response.aread()
                        raise AIServiceError(self._error_message(response))
                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if not data:
                            continue
                        try:
                            chunk = json.loads(data)
                        except json.JSONDecodeError as e:
                            raise AIServiceError("Gemini stream sent a malformed event") from e
                        text = _extract_text(chunk)
                        if text:
                            yield text
        except httpx.TimeoutException as e:
            raise AIServiceError("Gemini API timed out") from e
        except httpx.HTTPError as e:
            raise AIServiceError(f"Gemini API connection failed: {e}") from e


ai_service = AIService()
