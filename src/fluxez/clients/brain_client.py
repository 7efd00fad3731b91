"""Brain API Client for AI Operations

App generation, pattern search and media generation backed by the Fluxez
AI service. Exposed on the facade as both ``brain`` and ``ai``.

Generation calls can take minutes. They default to
``DefaultConfig.LONG_RUNNING_TIMEOUT`` and accept a per-call ``timeout`` in
milliseconds.
"""

import logging
from typing import Any

from ..config import DefaultConfig
from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

DEFAULT_FRAMEWORK = "react"
DEFAULT_COMPLEXITY = "standard"


class BrainClient(BaseAPIClient):
    """Client for the brain (AI) API."""

    ENDPOINT = "/brain"

    async def generate(
        self,
        prompt: str,
        timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT,
        **options: Any,
    ) -> dict[str, Any]:
        """Generate an application from a natural-language prompt.

        Args:
            prompt: Description of the app to build
            timeout: Per-call timeout in milliseconds
            **options: Generation options (``framework``, ``styling``,
                ``database``, ``includeAuth``, ``features``...)

        Returns:
            Generated app description
        """
        self._require(prompt, "prompt")
        generate_options = {
            "includeWorkflows": False,
            "includeAuth": True,
            "includePayments": False,
            "complexity": DEFAULT_COMPLEXITY,
            "framework": DEFAULT_FRAMEWORK,
            "styling": "tailwind",
            "database": "postgresql",
            "deployment": "vercel",
            "features": [],
            **options,
        }
        logger.debug(f"Generating app ({generate_options['framework']})")
        return await self._post(
            self._build_url("generate"),
            {"prompt": prompt, "options": generate_options},
            timeout=timeout,
        )

    async def understand(self, prompt: str) -> dict[str, Any]:
        """Extract structured requirements from a prompt."""
        self._require(prompt, "prompt")
        return await self._post(self._build_url("understand"), {"prompt": prompt})

    async def find_patterns(
        self,
        query: str,
        limit: int = 10,
        threshold: float = 0.7,
        app_type: str | None = None,
    ) -> list[dict[str, Any]]:
        self._require(query, "query")
        return await self._post(
            self._build_url("patterns"),
            self._compact(
                {"query": query, "limit": limit, "threshold": threshold, "appType": app_type}
            ),
            idempotent=True,
        )

    async def suggest_architecture(self, requirements: dict[str, Any]) -> dict[str, Any]:
        self._require(requirements, "requirements")
        return await self._post(self._build_url("architecture"), requirements)

    async def select_components(
        self,
        app_type: str,
        framework: str = DEFAULT_FRAMEWORK,
        complexity: str = DEFAULT_COMPLEXITY,
        features: list[str] | None = None,
    ) -> dict[str, Any]:
        self._require(app_type, "app_type")
        return await self._post(
            self._build_url("components"),
            {
                "appType": app_type,
                "framework": framework,
                "complexity": complexity,
                "features": features or [],
            },
        )

    async def train(self, training_data: list[dict[str, Any]]) -> dict[str, Any]:
        self._require(training_data, "training_data")
        return await self._post(self._build_url("train"), {"trainingData": training_data})

    async def get_stats(self) -> dict[str, Any]:
        return await self._get(self._build_url("stats"))

    async def generate_training_data(self, **options: Any) -> dict[str, Any]:
        return await self._post(self._build_url("training-data", "generate"), options)

    async def validate_app(self, app_data: dict[str, Any]) -> dict[str, Any]:
        self._require(app_data, "app_data")
        return await self._post(
            self._build_url("validate"), {"appData": app_data}, idempotent=True
        )

    async def suggest_improvements(
        self, app_data: dict[str, Any], feedback: str | None = None
    ) -> dict[str, Any]:
        self._require(app_data, "app_data")
        return await self._post(
            self._build_url("improvements"),
            self._compact({"appData": app_data, "feedback": feedback}),
        )

    # Media generation
    async def generate_text(
        self,
        prompt: str,
        timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(prompt, "prompt")
        return await self._post(
            self._build_url("text", "generate"), {"prompt": prompt, **options}, timeout=timeout
        )

    async def generate_image(
        self,
        prompt: str,
        timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(prompt, "prompt")
        return await self._post(
            self._build_url("image", "generate"), {"prompt": prompt, **options}, timeout=timeout
        )

    async def generate_audio(
        self,
        text: str,
        timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT,
        **options: Any,
    ) -> dict[str, Any]:
        """Text to speech. Options include ``voice`` and ``format``."""
        self._require(text, "text")
        return await self._post(
            self._build_url("audio", "generate"), {"text": text, **options}, timeout=timeout
        )

    async def generate_video(
        self,
        prompt: str,
        timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(prompt, "prompt")
        return await self._post(
            self._build_url("video", "generate"), {"prompt": prompt, **options}, timeout=timeout
        )

    async def generate_embeddings(self, text: str | list[str]) -> dict[str, Any]:
        self._require(text, "text")
        return await self._post(
            self._build_url("embeddings", "generate"), {"text": text}, idempotent=True
        )

    async def analyze_content(
        self, content: str, analysis_type: str | None = None
    ) -> dict[str, Any]:
        self._require(content, "content")
        return await self._post(
            self._build_url("analyze", "content"),
            self._compact({"content": content, "analysisType": analysis_type}),
            idempotent=True,
        )
