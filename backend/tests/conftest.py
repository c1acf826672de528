import os

# No real provider and no backoff waits under test
os.environ.setdefault("GROQ_API_KEY", "test-key")
os.environ["LLM_RETRY_DELAY"] = "0"
os.environ["LLM_MAX_RETRIES"] = "1"
os.environ["TTS_FALLBACK_ENABLED"] = "true"

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

SOURCE_TEXT = (
    "Photosynthesis is the process by which green plants, algae and some bacteria convert light "
    "energy into chemical energy. During photosynthesis, chlorophyll absorbs sunlight, and the plant "
    "uses that energy to turn carbon dioxide and water into glucose and oxygen. The glucose fuels "
    "cellular respiration, while the oxygen is released into the atmosphere as a by-product. "
    "The light-dependent reactions take place in the thylakoid membranes, and the Calvin cycle "
    "takes place in the stroma of the chloroplast."
)

SIMPLIFIED = {
    "summary": "Plants use sunlight to make their own food. They also give off oxygen.",
    "bulletPoints": [
        "Chlorophyll absorbs sunlight.",
        "Carbon dioxide and water become glucose and oxygen.",
        "Oxygen is released into the air.",
    ],
    "eli5": "Plants eat sunlight and breathe out the air we need.",
}

TRANSLATED_ES = {
    "summary": "Las plantas usan la luz del sol para hacer su propio alimento.",
    "bulletPoints": [
        "La clorofila absorbe la luz del sol.",
        "El dióxido de carbono y el agua se convierten en glucosa y oxígeno.",
        "El oxígeno se libera al aire.",
    ],
    "eli5": "Las plantas comen luz del sol.",
}

KEY_TERMS = {
    "terms": [
        {"term": "Photosynthesis", "definition": "How plants turn sunlight into food."},
        {"term": "Chlorophyll", "definition": "The green stuff in leaves that catches sunlight."},
        {"term": "Glucose", "definition": "A kind of sugar that gives living things energy."},
    ]
}


def provider_error(status: int, text: str) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/audio/speech")
    response = httpx.Response(status, text=text, request=request)
    return openai.APIStatusError(text, response=response, body=None)


class FakeLLMService:
    """
    Stand-in for LLMService. Structured replies are queued per schema name;
    a queued Exception is raised instead of returned.
    """

    def __init__(self):
        self.responses: dict[str, list] = {}
        self.calls: list[dict] = []
        self.speech_calls: list[dict] = []
        self.audio = b"ID3-fake-mp3"
        self.speech_error: Exception | None = None

    def queue(self, schema_name: str, *replies):
        self.responses.setdefault(schema_name, []).extend(replies)

    async def generate_structured(self, prompt, system_instruction, schema, temperature=0.2, max_tokens=4096):
        self.calls.append({
            "schema": schema.__name__,
            "prompt": prompt,
            "system": system_instruction,
            "max_tokens": max_tokens,
        })
        queue = self.responses.get(schema.__name__) or []
        if not queue:
            raise ValueError(f"No reply queued for {schema.__name__}")
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        return schema.model_validate(reply)

    async def synthesize_speech(self, text, model, voice, response_format="mp3"):
        self.speech_calls.append({"text": text, "model": model, "voice": voice})
        if self.speech_error is not None:
            raise self.speech_error
        return self.audio


@pytest.fixture
def fake_llm():
    return FakeLLMService()


@pytest.fixture
def client(fake_llm):
    from main import app
    from services.llm_service import get_llm_service
    from api.routes import sessions

    app.dependency_overrides[get_llm_service] = lambda: fake_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    sessions.sessions.clear()
