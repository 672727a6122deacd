"""
Gemini AI Service for Amy

Uses the google.genai SDK for:
- Parsing free-text subscription descriptions into form fields
- Suggesting monthly and yearly budgets from a spending analysis

Both calls request JSON output and validate it against pydantic models.
"""

import asyncio
import json
import logging
from datetime import date
from typing import Any, Dict, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from amy.config.settings import Settings, get_settings
from amy.domain.ai_parsing import ParsedSubscription
from amy.domain.budget_analysis import BudgetRecommendation
from amy.domain.subscription import SUBSCRIPTION_CATEGORIES
from amy.infrastructure.ai.prompts import build_parse_subscription_prompt
from amy.infrastructure.exceptions import (
    AIServiceError,
    ConfigurationError,
    RateLimitError,
)


logger = logging.getLogger(__name__)


class GeminiService:
    """
    Gemini client wrapper returning validated structured output.

    The SDK is synchronous, so every call runs in a worker thread.
    """

    MAX_OUTPUT_TOKENS = 2048
    PARSE_TEMPERATURE = 0.1
    BUDGET_TEMPERATURE = 0.4

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        config = get_settings()
        api_key = api_key or config.google_api_key
        self.model = model or config.gemini_model

        if client is None:
            if not api_key:
                raise ConfigurationError(
                    "Missing GOOGLE_API_KEY environment variable",
                    missing_keys=["GOOGLE_API_KEY"],
                )
            client = genai.Client(api_key=api_key)

        self._client = client
        logger.info(f"GeminiService initialized with model: {self.model}")

    @classmethod
    def from_settings(cls, config: Settings) -> "GeminiService":
        return cls(api_key=config.google_api_key, model=config.gemini_model)

    @property
    def client(self) -> genai.Client:
        return self._client

    async def parse_subscription(self, text: str, today: date) -> ParsedSubscription:
        """Extract subscription fields from a user's free-text description."""
        prompt = build_parse_subscription_prompt(text, today, SUBSCRIPTION_CATEGORIES)
        data = await self._generate_json(
            prompt,
            operation="parse_subscription",
            temperature=self.PARSE_TEMPERATURE,
        )
        return self._validate(ParsedSubscription, data, "parse_subscription")

    async def suggest_budget(self, prompt: str) -> BudgetRecommendation:
        """Ask the model for a budget recommendation built from ``prompt``."""
        data = await self._generate_json(
            prompt,
            operation="budget_recommendations",
            temperature=self.BUDGET_TEMPERATURE,
        )
        return self._validate(BudgetRecommendation, data, "budget_recommendations")

    async def _generate_json(
        self,
        prompt: str,
        operation: str,
        temperature: float,
    ) -> Dict[str, Any]:
        try:
            response = await asyncio.to_thread(
                lambda: self.client.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        temperature=temperature,
                        max_output_tokens=self.MAX_OUTPUT_TOKENS,
                        response_mime_type="application/json",
                    ),
                )
            )
        except Exception as e:
            error_msg = str(e).lower()

            if "rate" in error_msg or "quota" in error_msg:
                raise RateLimitError(
                    "Gemini API rate limit exceeded",
                    original_error=e,
                )

            raise AIServiceError(
                f"Gemini request failed: {str(e)}",
                model=self.model,
                operation=operation,
                original_error=e,
            )

        if not response.text:
            raise AIServiceError(
                "Empty response from Gemini",
                model=self.model,
                operation=operation,
            )

        return self._parse_json_response(response.text, operation)

    def _validate(self, schema, data: Dict[str, Any], operation: str):
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            raise AIServiceError(
                "Gemini response did not match the expected schema",
                model=self.model,
                operation=operation,
                original_error=e,
            )

    def _parse_json_response(self, response_text: str, operation: str) -> Dict[str, Any]:
        """Parse JSON from response, handling markdown code blocks."""
        text = response_text.strip()

        if text.startswith("```json"):
            text = text[7:]
        elif text.startswith("```"):
            text = text[3:]

        if text.endswith("```"):
            text = text[:-3]

        try:
            parsed = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise AIServiceError(
                "Gemini response was not valid JSON",
                model=self.model,
                operation=operation,
                original_error=e,
            )

        if not isinstance(parsed, dict):
            raise AIServiceError(
                "Gemini response was not a JSON object",
                model=self.model,
                operation=operation,
            )
        return parsed
