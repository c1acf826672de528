import io
import asyncio
import logging
import openai
from gtts import gTTS
from config import get_settings
from services.validation import MAX_TTS_LENGTH

logger = logging.getLogger("speech_service")

MAX_AUDIO_CHARACTERS = MAX_TTS_LENGTH
TERMS_ACCEPTANCE_MARKER = "terms acceptance"


class SpeechProviderError(Exception):
    """The TTS provider rejected the request. Carries the provider's status and message."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def requires_terms_acceptance(self) -> bool:
        return TERMS_ACCEPTANCE_MARKER in self.message


class SpeechService:
    """Groq PlayAI text-to-speech, falling back to gTTS when PlayAI is unavailable."""

    def __init__(self, llm_service):
        self.llm = llm_service
        self.settings = get_settings()

    def voice_for(self, language: str) -> tuple[str, str]:
        if language == "ar":
            return self.settings.TTS_MODEL_ARABIC, self.settings.TTS_VOICE_ARABIC
        return self.settings.TTS_MODEL, self.settings.TTS_VOICE

    async def synthesize(self, text: str, language: str = "en") -> bytes:
        model, voice = self.voice_for(language)
        logger.info(f"Synthesizing {len(text)} chars with {model}/{voice}")
        try:
            return await self.llm.synthesize_speech(text, model=model, voice=voice)
        except openai.APIStatusError as e:
            error = SpeechProviderError(e.status_code, _provider_message(e))
            logger.error(f"TTS provider error ({error.status_code}): {error.message}")
            if error.requires_terms_acceptance and self.settings.TTS_FALLBACK_ENABLED:
                logger.info("PlayAI terms not accepted, using gTTS fallback")
                return await self.synthesize_fallback(text, language)
            raise error from e

    async def synthesize_fallback(self, text: str, language: str = "en") -> bytes:
        return await asyncio.to_thread(_gtts_bytes, text, language)


def _provider_message(error: openai.APIStatusError) -> str:
    return error.response.text or error.message


def _gtts_bytes(text: str, language: str) -> bytes:
    audio = io.BytesIO()
    gTTS(text=text, lang=language).write_to_fp(audio)
    return audio.getvalue()
