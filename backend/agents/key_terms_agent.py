import logging
from agents.base_agent import BaseAgent
from models.content import KeyTermList, SimplifiedContent
from models.language import language_name

logger = logging.getLogger("agent.key_terms")


class KeyTermsAgent(BaseAgent):
    """Picks out the hardest terms in a text and defines each in one simple sentence."""

    def __init__(self, llm_service, config: dict | None = None):
        super().__init__("key_terms", llm_service, config)

    def get_system_prompt(self) -> str:
        return """You are an accessibility assistant helping students with learning differences like ADHD and dyslexia.

Your task is to identify the most important complex or specialized terms from educational text that a student might struggle with, and provide simple, clear definitions.

Instructions:
1. Identify 3-10 key terms that are complex, technical, or specialized
2. Focus on terms that would break a student's focus if they had to look them up
3. Provide definitions that are:
   - One sentence long
   - Use simple, everyday language
   - Assume no prior knowledge
   - Help maintain reading flow
4. Both the term and its definition MUST be in the target language
5. Return the terms in order of importance (most critical first)

Return a JSON object with a "terms" array of {"term", "definition"} objects."""

    async def run(self, input_data: dict) -> KeyTermList:
        content: SimplifiedContent = input_data["content"]
        original_text = input_data.get("original_text", "")
        target_language = language_name(input_data.get("language", "en"))

        prompt = f"""Target Language: {target_language}

Original text:
{original_text}

Simplified content:
Summary: {content.summary}
Key Points: {'. '.join(content.bullet_points)}
ELI5: {content.eli5}"""

        return await self.llm.generate_structured(
            prompt,
            self.get_system_prompt(),
            KeyTermList,
            max_tokens=1500,
        )
