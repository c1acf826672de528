DEFAULT_LANGUAGE = "en"

# Languages offered in the UI, in display order
LANGUAGES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "ru": "Russian",
}

# Translation targets exclude the source language
TRANSLATION_LANGUAGES: dict[str, str] = {
    code: name for code, name in LANGUAGES.items() if code != DEFAULT_LANGUAGE
}

SPEECH_LANGUAGES = ("en", "ar")

RTL_LANGUAGES = ("ar",)


def language_name(code: str, default: str = "English") -> str:
    return LANGUAGES.get(code, default)
