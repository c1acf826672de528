import re
import logging
from typing import Any, Iterable
from pydantic import ValidationError
from models.content import SimplifiedContent
from models.language import SPEECH_LANGUAGES

logger = logging.getLogger("validation")

MIN_TEXT_LENGTH = 100
MAX_TEXT_LENGTH = 150000
MAX_TTS_LENGTH = 10000
MAX_SANITIZED_LENGTH = 100000

MAX_SECTION_LENGTH = 10000
MAX_BULLET_POINTS = 20
MAX_BULLET_LENGTH = 1000

_IGNORE = re.compile(r"ignore\s+(previous|above|all)\s+(instructions?|prompts?|rules?)", re.IGNORECASE)
_DISREGARD = re.compile(r"disregard\s+(previous|above|all)\s+(instructions?|prompts?|rules?)", re.IGNORECASE)
_FORGET = re.compile(r"forget\s+(previous|above|all)\s+(instructions?|prompts?|rules?)", re.IGNORECASE)
_SYSTEM_ROLE = re.compile(r"system\s*:\s*", re.IGNORECASE)
_ASSISTANT_ROLE = re.compile(r"assistant\s*:\s*", re.IGNORECASE)
_USER_ROLE = re.compile(r"user\s*:\s*", re.IGNORECASE)
_IM_START = re.compile(r"<\|im_start\|>", re.IGNORECASE)
_IM_END = re.compile(r"<\|im_end\|>", re.IGNORECASE)
_INSTRUCTION_HEADER = re.compile(r"###\s*instruction", re.IGNORECASE)
_YOU_ARE_NOW = re.compile(r"you\s+are\s+now", re.IGNORECASE)
_PRETEND = re.compile(r"pretend\s+to\s+be", re.IGNORECASE)
_ACT_AS = re.compile(r"act\s+as\s+a", re.IGNORECASE)

# Raw source text gets the strictest check
SOURCE_TEXT_PATTERNS: tuple[re.Pattern, ...] = (
    _IGNORE, _DISREGARD, _FORGET,
    _SYSTEM_ROLE, _ASSISTANT_ROLE, _USER_ROLE,
    _IM_START, _IM_END, _INSTRUCTION_HEADER,
    _YOU_ARE_NOW, _PRETEND, _ACT_AS,
)
CONTENT_PATTERNS: tuple[re.Pattern, ...] = (
    _IGNORE, _DISREGARD, _SYSTEM_ROLE, _ASSISTANT_ROLE, _IM_START,
)
SPEECH_PATTERNS: tuple[re.Pattern, ...] = (_IGNORE, _SYSTEM_ROLE, _ASSISTANT_ROLE)

_HTML_TAG = re.compile(r"<[^>]*>")
_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
# Tab, newline, vertical tab, form feed and carriage return are left for the whitespace pass
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0E-\x1F\x7F-\x9F]")
_WHITESPACE = re.compile(r"\s+")


class InputValidationError(ValueError):
    """Raised when user input is rejected before it reaches the model."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def detect_prompt_injection(text: str, patterns: Iterable[re.Pattern] = SOURCE_TEXT_PATTERNS) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def validate_source_text(text: Any) -> str:
    """Check text submitted for simplification. Returns it unchanged when acceptable."""
    if not text or not isinstance(text, str) or not text.strip():
        raise InputValidationError("Valid text is required")

    if len(text) < MIN_TEXT_LENGTH:
        raise InputValidationError(f"Text must be at least {MIN_TEXT_LENGTH} characters")

    if len(text) > MAX_TEXT_LENGTH:
        raise InputValidationError(f"Text exceeds maximum length of {MAX_TEXT_LENGTH} characters")

    if detect_prompt_injection(text, SOURCE_TEXT_PATTERNS):
        logger.warning("Rejected source text: prompt injection pattern matched")
        raise InputValidationError("Invalid input detected. Please provide educational content only.")

    return text


def validate_content(content: Any) -> SimplifiedContent:
    """Validate a client-supplied {summary, bulletPoints, eli5} object."""
    if not content or not isinstance(content, dict):
        raise InputValidationError("Invalid content format")

    summary = content.get("summary")
    bullet_points = content.get("bulletPoints", content.get("bullet_points"))
    eli5 = content.get("eli5")

    if not isinstance(summary, str) or len(summary) > MAX_SECTION_LENGTH:
        raise InputValidationError("Invalid content format")
    if not isinstance(bullet_points, list) or len(bullet_points) > MAX_BULLET_POINTS:
        raise InputValidationError("Invalid content format")
    if not isinstance(eli5, str) or len(eli5) > MAX_SECTION_LENGTH:
        raise InputValidationError("Invalid content format")

    for point in bullet_points:
        if not isinstance(point, str) or len(point) > MAX_BULLET_LENGTH:
            raise InputValidationError("Invalid content format")

    try:
        return SimplifiedContent(summary=summary, bullet_points=bullet_points, eli5=eli5)
    except ValidationError as e:
        raise InputValidationError("Invalid content format") from e


def content_text(content: SimplifiedContent) -> str:
    return f"{content.summary} {' '.join(content.bullet_points)} {content.eli5}"


def check_content_injection(content: SimplifiedContent) -> None:
    if detect_prompt_injection(content_text(content), CONTENT_PATTERNS):
        logger.warning("Rejected content: prompt injection pattern matched")
        raise InputValidationError("Invalid input detected")


def validate_speech_text(text: Any, language: Any = "en") -> str:
    if not text or not isinstance(text, str):
        raise InputValidationError("Valid text is required")

    if len(text) > MAX_TTS_LENGTH:
        raise InputValidationError(f"Text exceeds maximum length of {MAX_TTS_LENGTH} characters")

    if language not in SPEECH_LANGUAGES:
        raise InputValidationError("Unsupported language for TTS")

    if detect_prompt_injection(text, SPEECH_PATTERNS):
        logger.warning("Rejected speech text: prompt injection pattern matched")
        raise InputValidationError("Invalid input detected")

    return text


def sanitize_text(text: Any) -> str:
    """Strip markup, scripts and control characters from extracted document text."""
    if not isinstance(text, str):
        text = str(text or "")

    cleaned = _HTML_TAG.sub("", text)
    cleaned = _SCRIPT_BLOCK.sub("", cleaned)
    cleaned = _JS_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    cleaned = cleaned.replace("\0", "")
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()

    if len(cleaned) > MAX_SANITIZED_LENGTH:
        cleaned = cleaned[:MAX_SANITIZED_LENGTH]

    return cleaned
