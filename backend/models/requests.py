from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional

# Shapes are checked in services.validation, which owns the error messages.


class SimplifyRequest(BaseModel):
    text: Any = None


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Any = None
    target_language: Any = Field(None, alias="targetLanguage")


class ExplainTermsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Any = None
    original_text: Any = Field("", alias="originalText")
    language: str = "en"


class SpeechRequest(BaseModel):
    text: Any = None
    language: Any = "en"


class ExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Any = None
    key_terms: Optional[list[dict]] = Field(None, alias="keyTerms")
    language: str = "en"


class SessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Any = None
    language: str = "en"
    explain_terms: bool = Field(False, alias="explainTerms")
    speak: bool = False
