import json
import logging
import asyncio
from typing import Type, TypeVar
from openai import OpenAI
from pydantic import BaseModel, ValidationError
from config import get_settings

logger = logging.getLogger("llm_service")

SchemaT = TypeVar("SchemaT", bound=BaseModel)

JSON_ONLY_INSTRUCTION = (
    "\n\nIMPORTANT: Respond ONLY with valid JSON. No markdown, no code blocks, "
    "no explanation. Just the raw JSON object."
)


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


class LLMService:
    """Groq service wrapper (Llama 4 Maverick chat + PlayAI speech via OpenAI-compatible API)."""

    def __init__(self, client: OpenAI | None = None):
        settings = get_settings()
        self.client = client or OpenAI(
            base_url=settings.GROQ_BASE_URL,
            api_key=settings.GROQ_API_KEY,
        )
        self.model = settings.LLM_MODEL

    async def generate(
        self,
        prompt: str,
        system_instruction: str = "",
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> str:
        """Generate text content."""
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await asyncio.to_thread(
                self.client.chat.completions.create,
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_completion_tokens=max_tokens,
                top_p=1,
                **kwargs,
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"LLM generation error: {e}")
            raise

    async def generate_json(
        self,
        prompt: str,
        system_instruction: str = "",
        temperature: float = 0.2,
        max_tokens: int = 4096,
    ) -> dict:
        """Generate structured JSON output."""
        system = (system_instruction or "") + JSON_ONLY_INSTRUCTION

        response = await self.generate(
            prompt,
            system_instruction=system,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )

        cleaned = strip_code_fences(response)
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"JSON parse error: {e}\nResponse: {cleaned[:500]}")
            raise ValueError(f"LLM returned invalid JSON: {e}")

    async def generate_structured(
        self,
        prompt: str,
        system_instruction: str,
        schema: Type[SchemaT],
        temperature: float = 0.2,
        max_tokens: int = 4096,
    ) -> SchemaT:
        """
        Generate output constrained to a pydantic schema.
        The JSON schema is appended to the system prompt and the reply is validated against it.
        """
        schema_json = json.dumps(schema.model_json_schema(by_alias=True))
        system = f"{system_instruction}\n\nThe JSON object must match this JSON schema:\n{schema_json}"

        result = await self.generate_json(
            prompt,
            system_instruction=system,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        try:
            return schema.model_validate(result)
        except ValidationError as e:
            logger.error(f"Schema validation error for {schema.__name__}: {e}")
            raise ValueError(f"LLM output does not match {schema.__name__}: {e}")

    async def synthesize_speech(
        self,
        text: str,
        model: str,
        voice: str,
        response_format: str = "mp3",
    ) -> bytes:
        """Convert text to speech. Provider errors propagate as openai.APIStatusError."""
        response = await asyncio.to_thread(
            self.client.audio.speech.create,
            model=model,
            voice=voice,
            input=text,
            response_format=response_format,
        )
        return response.read()


# Singleton
_llm_service = None


def get_llm_service() -> LLMService:
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService()
    return _llm_service
