import logging
from agents.base_agent import BaseAgent
from models.content import SimplifiedContent, TranslationOutput
from models.language import TRANSLATION_LANGUAGES, RTL_LANGUAGES

logger = logging.getLogger("agent.translation")


class TranslationAgent(BaseAgent):
    """Translates simplified content into one of the supported languages."""

    def __init__(self, llm_service, config: dict | None = None):
        super().__init__("translation", llm_service, config)

    def get_system_prompt(self, target_language: str = "") -> str:
        rtl_note = (
            "- For Arabic, ensure proper right-to-left text formatting\n"
            if target_language in RTL_LANGUAGES
            else ""
        )
        return f"""You are a professional translator specializing in accessibility content.

Your task is to translate simplified content while maintaining the same clarity and simplicity.

Instructions:
- Translate all three sections (summary, bulletPoints, eli5) into the target language
- Keep the same structure and level of simplicity
- Maintain accessibility-friendly language
- Preserve the meaning and tone
- Aim to keep similar length to the original
{rtl_note}
Keep translations clear and concise for text-to-speech compatibility (aim for under 8,000 characters total when possible)."""

    async def run(self, input_data: dict) -> TranslationOutput:
        content: SimplifiedContent = input_data["content"]
        target_language = input_data["target_language"]
        language_name = TRANSLATION_LANGUAGES.get(target_language, target_language)

        key_points = "\n".join(f"{i + 1}. {point}" for i, point in enumerate(content.bullet_points))
        prompt = f"""Target Language: {language_name}

Original content to translate:
Summary: {content.summary}

Key Points:
{key_points}

ELI5: {content.eli5}"""

        return await self.llm.generate_structured(
            prompt,
            self.get_system_prompt(target_language),
            TranslationOutput,
            max_tokens=3000,
        )
