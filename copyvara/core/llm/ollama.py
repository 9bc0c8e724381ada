"""
Ollama LLM provider using native ollama-python SDK.
"""

import json

import ollama
from pydantic import BaseModel

from copyvara.core.llm.base import LLMProvider
from copyvara.utils.exceptions import UpstreamGenerationError, ValidationError
from copyvara.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaLLM(LLMProvider):
    """
    Ollama LLM provider for text generation.

    Uses native ollama-python SDK for chat completions
    with JSON mode for structured outputs.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama LLM provider.

        Args:
            host: Ollama server URL
            model: Model name for text generation (e.g., "llama3.1", "qwen2.5")
            timeout: Request timeout in seconds
        """
        self.host = host
        self.model = model
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        response_format: type[BaseModel] | None = None,
        system_prompt: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.0,
        **kwargs,
    ) -> BaseModel | str:
        """
        Generate completion using Ollama.

        Supports structured output via JSON mode and schema validation.

        Args:
            prompt: Input prompt
            response_format: Optional Pydantic model for structured JSON output
            system_prompt: Optional system message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            **kwargs: Additional options (passed to Ollama)

        Returns:
            Pydantic model if response_format provided, else string

        Raises:
            UpstreamGenerationError: If the request fails or structured output cannot be parsed
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        options = {
            "temperature": temperature,
            "num_predict": max_tokens,
            **kwargs.get("options", {}),
        }

        format_type = None
        if response_format:
            format_type = "json"
            prompt = f"""{prompt}

You MUST respond with valid JSON matching this structure:
{json.dumps(self._example_from_schema(response_format), indent=2, ensure_ascii=False)}

IMPORTANT:
- Replace placeholder values like "<field_name>" with actual content
- Return ONLY valid JSON, no markdown formatting or extra text
- Do not return the schema itself, return actual data"""

        try:
            response = await self.client.chat(
                model=self.model,
                messages=self.build_messages(prompt, system_prompt),
                format=format_type,
                options=options,
                **{k: v for k, v in kwargs.items() if k != "options"},
            )
        except Exception as e:
            logger.bind(model=self.model, host=self.host, error_type=type(e).__name__).error(
                f"Ollama request failed: {e}"
            )
            raise UpstreamGenerationError(f"Ollama request failed: {e}") from e

        content = response["message"]["content"] or ""

        if response_format:
            try:
                return response_format.model_validate_json(self._extract_json(content))
            except Exception as e:
                raise UpstreamGenerationError(
                    f"Failed to parse structured output: {e}",
                    context={
                        "raw_response": content[:500],
                        "expected_format": response_format.__name__,
                    },
                ) from e

        return content

    @staticmethod
    def _example_from_schema(response_format: type[BaseModel]) -> dict:
        """
        Build a small example object from the model's top-level properties.

        Args:
            response_format: Pydantic model class

        Returns:
            Example dict with placeholder values
        """
        example = {}
        properties = response_format.model_json_schema().get("properties", {})

        for field_name, field_info in properties.items():
            field_type = field_info.get("type", "object" if "anyOf" in field_info else "string")

            if field_type == "string":
                example[field_name] = f"<{field_name}>"
            elif field_type in ("number", "integer"):
                example[field_name] = 50 if "score" in field_name else 1
            elif field_type == "boolean":
                example[field_name] = True
            elif field_type == "array":
                example[field_name] = []
            else:
                example[field_name] = {}

        return example

    def _extract_json(self, content: str) -> str:
        """
        Extract JSON from content that might have markdown formatting.

        Args:
            content: Raw content that may contain JSON

        Returns:
            Cleaned JSON string
        """
        content = content.strip()

        if "```json" in content:
            content = content.split("```json")[1].split("```")[0].strip()
        elif "```" in content:
            content = content.split("```")[1].split("```")[0].strip()

        return content

    async def close(self):
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
