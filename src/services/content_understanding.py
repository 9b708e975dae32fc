"""Content-understanding service for Gemini and Google text-to-speech."""

import base64
import json
import logging
from typing import Any

import httpx

from src.config import get_settings
from src.services.prompts import (
    REMIX_SYSTEM_PROMPT,
    STEP_PREPARATION_SYSTEM_PROMPT,
    get_recipe_extraction_prompt,
    get_remix_prompt,
    get_step_preparation_prompt,
)

logger = logging.getLogger(__name__)


class ContentUnderstandingService:
    """Service for understanding cooking videos and producing derived media."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.api_key = self.settings.gemini_api_key
        self.base_url = self.settings.gemini_base_url
        self.model = self.settings.recipe_model
        self.embedding_model = self.settings.embedding_model
        self.timeout = self.settings.content_timeout_seconds

    @property
    def is_configured(self) -> bool:
        """Check if the Gemini API key is configured."""
        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        if not self.is_configured:
            raise ValueError("Gemini API not configured")
        return {"x-goog-api-key": self.api_key}

    async def generate(
        self,
        parts: list[dict[str, Any]],
        system_prompt: str | None = None,
        temperature: float = 0.2,
        json_output: bool = True,
    ) -> str:
        """Generate a text response from a list of content parts."""
        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": temperature},
        }
        if json_output:
            body["generationConfig"]["responseMimeType"] = "application/json"
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                headers=self._headers(),
                json=body,
            )
            response.raise_for_status()
            data = response.json()

        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = data.get("promptFeedback", {}).get("blockReason")
            raise ValueError(f"Gemini returned no candidates (block reason: {block_reason})")
        content_parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in content_parts)

    async def generate_json(
        self,
        parts: list[dict[str, Any]],
        system_prompt: str | None = None,
        temperature: float = 0.1,
    ) -> Any:
        """Generate structured JSON response from the model."""
        try:
            result = await self.generate(
                parts=parts,
                system_prompt=system_prompt,
                temperature=temperature,
            )
            # Clean up response - remove markdown code blocks if present
            result = result.strip()
            if result.startswith("```json"):
                result = result[7:]
            if result.startswith("```"):
                result = result[3:]
            if result.endswith("```"):
                result = result[:-3]
            result = result.strip()

            return json.loads(result)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse Gemini response as JSON: {e}")
            logger.warning(f"Raw response: {result if 'result' in locals() else 'N/A'}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling Gemini: {e}")
            raise

    async def understand(
        self,
        source: str | bytes,
        mime_type: str | None = None,
        auxiliary_text: str | None = None,
    ) -> dict[str, Any]:
        """Extract a raw recipe dict from a video URL or raw media bytes."""
        mime_type = mime_type or "video/mp4"
        if isinstance(source, bytes):
            media_part = {
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.standard_b64encode(source).decode("utf-8"),
                }
            }
        else:
            media_part = {"file_data": {"mime_type": mime_type, "file_uri": source}}

        result = await self.generate_json(
            parts=[media_part, {"text": get_recipe_extraction_prompt(auxiliary_text)}],
        )
        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
        return result

    async def embed(self, text: str) -> list[float]:
        """Get the embedding vector for a piece of text."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/models/{self.embedding_model}:embedContent",
                headers=self._headers(),
                json={
                    "model": f"models/{self.embedding_model}",
                    "content": {"parts": [{"text": text}]},
                    "taskType": "RETRIEVAL_DOCUMENT",
                },
            )
            response.raise_for_status()
            data = response.json()
        return data["embedding"]["values"]

    async def synthesize_speech(self, text: str) -> bytes:
        """Synthesize MP3 narration for a piece of text."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.settings.tts_base_url}/text:synthesize",
                headers=self._headers(),
                json={
                    "input": {"text": text},
                    "voice": {
                        "languageCode": self.settings.tts_language_code,
                        "name": self.settings.tts_voice_name,
                    },
                    "audioConfig": {"audioEncoding": "MP3"},
                },
            )
            response.raise_for_status()
            data = response.json()

        audio_content = data.get("audioContent")
        if not audio_content:
            raise ValueError("No audio content returned from text-to-speech")
        return base64.b64decode(audio_content)

    async def prepare_steps(
        self, title: str, ingredients: list[dict], instructions: list[str]
    ) -> list[dict[str, Any]]:
        """Compute a preparation guide for every instruction step."""
        result = await self.generate_json(
            parts=[{"text": get_step_preparation_prompt(title, ingredients, instructions)}],
            system_prompt=STEP_PREPARATION_SYSTEM_PROMPT,
            temperature=0.3,
        )
        if not isinstance(result, list):
            raise ValueError("Step preparations must be a JSON array")
        return result

    async def remix_recipe(self, recipe: dict[str, Any], request: str) -> dict[str, Any]:
        """Propose a remixed version of a recipe for a free-text request."""
        result = await self.generate_json(
            parts=[{"text": get_remix_prompt(recipe, request)}],
            system_prompt=REMIX_SYSTEM_PROMPT,
            temperature=0.7,
        )
        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
        return result


def get_content_service() -> ContentUnderstandingService:
    """Get a content-understanding service instance."""
    return ContentUnderstandingService()
