import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Optional
from models.content import KeyTerm, SimplifiedContent
from models.language import DEFAULT_LANGUAGE, SPEECH_LANGUAGES

MIN_TEXT_CHARACTERS = 500


class StageState(BaseModel):
    status: str = "pending"
    detail: str = ""


class ReadingSession(BaseModel):
    """Ephemeral state of one reading session. Lives in memory only."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    input_text: str = ""
    language: str = DEFAULT_LANGUAGE
    simplified: Optional[SimplifiedContent] = None
    translated: Optional[SimplifiedContent] = None
    key_terms: Optional[list[KeyTerm]] = None
    audio: Optional[bytes] = None
    audio_skipped_reason: Optional[str] = None
    pdf: Optional[bytes] = None
    status: str = "created"
    pipeline: dict[str, StageState] = Field(default_factory=dict)
    events: list[dict] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def display_content(self) -> Optional[SimplifiedContent]:
        return self.translated or self.simplified

    @property
    def can_play_audio(self) -> bool:
        return self.language in SPEECH_LANGUAGES

    @property
    def meets_minimum(self) -> bool:
        return len(self.input_text.strip()) >= MIN_TEXT_CHARACTERS

    def set_simplified(self, content: SimplifiedContent):
        # A fresh simplification starts over in English
        self.simplified = content
        self.translated = None
        self.language = DEFAULT_LANGUAGE
        self.audio = None
        self.pdf = None

    def set_language(self, code: str):
        if code == self.language:
            return
        self.language = code
        self.translated = None
        self.audio = None
        self.pdf = None

    def clear(self):
        self.input_text = ""
        self.language = DEFAULT_LANGUAGE
        self.simplified = None
        self.translated = None
        self.key_terms = None
        self.audio = None
        self.audio_skipped_reason = None
        self.pdf = None
        self.status = "cleared"
        self.pipeline = {}

    def to_payload(self) -> dict:
        display = self.display_content
        return {
            "session_id": self.id,
            "status": self.status,
            "language": self.language,
            "simplified": self.simplified.to_payload() if self.simplified else None,
            "translated": self.translated.to_payload() if self.translated else None,
            "display": display.to_payload() if display else None,
            "meets_minimum": self.meets_minimum,
            "keyTerms": [t.model_dump() for t in self.key_terms] if self.key_terms is not None else None,
            "audio_available": self.audio is not None,
            "audio_skipped_reason": self.audio_skipped_reason,
            "export_available": self.pdf is not None,
            "pipeline": {k: v.model_dump() for k, v in self.pipeline.items()},
            "created_at": self.created_at.isoformat(),
        }
