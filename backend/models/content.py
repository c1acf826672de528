from pydantic import BaseModel, ConfigDict, Field


class SimplifiedContent(BaseModel):
    """Summary / key points / ELI5 triple, used for both simplified and translated text."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    bullet_points: list[str] = Field(alias="bulletPoints")
    eli5: str

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)

    def speech_text(self) -> str:
        """Text read aloud for this result."""
        return (
            f"Summary: {self.summary}. "
            f"Key points: {'. '.join(self.bullet_points)}. "
            f"Simple explanation: {self.eli5}"
        )


class SimplificationOutput(SimplifiedContent):
    """Shape the model must return when simplifying."""

    summary: str = Field(description="A concise 2-3 sentence summary of the main ideas")
    bullet_points: list[str] = Field(
        alias="bulletPoints",
        min_length=3,
        max_length=7,
        description="Key bullet points highlighting the most important information",
    )
    eli5: str = Field(
        description="An \"Explain Like I'm 5\" version - simple language that anyone can understand"
    )


class TranslationOutput(SimplifiedContent):
    summary: str = Field(description="Translated summary")
    bullet_points: list[str] = Field(alias="bulletPoints", description="Translated bullet points")
    eli5: str = Field(description="Translated ELI5 explanation")


class KeyTerm(BaseModel):
    term: str = Field(description="A complex or specialized term from the text")
    definition: str = Field(description="A simple, student-friendly definition in one sentence")


class KeyTermList(BaseModel):
    terms: list[KeyTerm] = Field(
        min_length=3,
        max_length=10,
        description="The most important complex terms that students might not understand",
    )
