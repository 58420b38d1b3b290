from pathlib import Path

from app.config.settings import Settings
from app.extraction.client_base import BaseExtractionClient
from app.extraction.example_client_adapter import ExampleClientAdapter
from app.extraction.extractor import DocumentExtractor
from app.extraction.gemini_client_adapter import GeminiClientAdapter
from app.extraction.openai_client_adapter import OpenAIClientAdapter
from app.extraction.prompt_loader import load_prompt


class ExtractionClientFactory:
    """Creates the configured extraction client and extractor."""

    PROVIDERS = ("gemini", "openai", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseExtractionClient:
        """Create the process-wide extraction client from application settings."""
        provider = settings.extraction_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        if provider == "gemini":
            if not settings.gemini_api_key:
                raise ValueError("gemini_api_key is required for extraction_provider=gemini")
            return GeminiClientAdapter(
                api_key=settings.gemini_api_key,
                timeout_seconds=settings.extraction_timeout_seconds,
            )
        if provider == "openai":
            if not settings.openai_api_key:
                raise ValueError("openai_api_key is required for extraction_provider=openai")
            return OpenAIClientAdapter(
                api_key=settings.openai_api_key,
                timeout_seconds=settings.extraction_timeout_seconds,
            )
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @classmethod
    def create_extractor(
        cls,
        settings: Settings,
        client: BaseExtractionClient | None = None,
    ) -> DocumentExtractor:
        """Create a DocumentExtractor around *client* (or a newly built one)."""
        prompt_path = Path(settings.extraction_prompt_path) if settings.extraction_prompt_path else None
        return DocumentExtractor(
            client=client if client is not None else cls.create(settings),
            model=cls._resolve_model_name(settings),
            default_prompt=load_prompt(prompt_path),
        )

    @classmethod
    def _resolve_model_name(cls, settings: Settings) -> str:
        provider = settings.extraction_provider.lower()
        key_map = {
            "gemini": settings.gemini_model,
            "openai": settings.openai_model_name,
            "example": "example",
        }
        model = key_map.get(provider, "")
        if not model:
            raise ValueError(f"A model name is required for extraction_provider={provider}")
        return model
