import logging
from typing import List, Optional, Sequence

import httpx

from app.core.config import settings
from app.core.exceptions import ErrorKind, ProviderError
from app.schemas.generation import Category, GenerationRequest, ProviderContext, RawGeneratedQuestion, Trait
from app.services.providers.base import error_from_status, generate_questions_with

logger = logging.getLogger(__name__)

PROVIDER_ID = "ollama"


class OllamaGenerationProvider:
    """
    Self-hosted generation via the Ollama HTTP API. Needs no credential; the
    base URL comes from the context endpoint or OLLAMA_BASE_URL.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self._model = model or settings.OLLAMA_MODEL
        self._transport = transport

    @classmethod
    def from_context(cls, context: ProviderContext) -> "OllamaGenerationProvider":
        return cls(base_url=context.endpoint, model=context.model)

    @property
    def name(self) -> str:
        return PROVIDER_ID

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=settings.PROVIDER_HTTP_TIMEOUT,
            transport=self._transport,
        )

    def _unreachable(self) -> ProviderError:
        return ProviderError(
            ErrorKind.PROVIDER_ERROR,
            f"Cannot connect to Ollama at {self._base_url}. Is it running?",
            PROVIDER_ID,
        )

    async def generate_questions(
        self,
        request: GenerationRequest,
        categories: Sequence[Category] = (),
        traits: Sequence[Trait] = (),
    ) -> List[RawGeneratedQuestion]:
        return await generate_questions_with(self, request, categories, traits)

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": settings.GENERATION_TEMPERATURE},
        }
        if system_prompt:
            payload["system"] = system_prompt
        if json_mode:
            payload["format"] = "json"

        logger.info(f"Ollama completion request (model={self._model}, url={self._base_url})")
        try:
            async with self._client() as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as e:
            raise self._unreachable() from e
        except httpx.TimeoutException as e:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "Ollama request timed out", PROVIDER_ID) from e
        except httpx.HTTPStatusError as e:
            raise error_from_status(
                e.response.status_code, f"Ollama error: {e.response.text}", PROVIDER_ID, "Ollama"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, f"Ollama error: {e}", PROVIDER_ID) from e

        text = data.get("response") if isinstance(data, dict) else None
        if not text:
            raise ProviderError(ErrorKind.PROVIDER_ERROR, "No response from Ollama", PROVIDER_ID)
        return text

    async def validate_api_key(self) -> bool:
        """No key to check; reports whether the server answers on /api/tags."""
        try:
            async with self._client() as client:
                response = await client.get("/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.info(f"Ollama not reachable at {self._base_url}: {e}")
            return False
