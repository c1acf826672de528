import logging
from agents.base_agent import BaseAgent
from models.content import SimplificationOutput

logger = logging.getLogger("agent.simplification")


class SimplificationAgent(BaseAgent):
    """Turns source text into a summary, key points and an ELI5 explanation."""

    def __init__(self, llm_service, config: dict | None = None):
        super().__init__("simplification", llm_service, config)

    def get_system_prompt(self) -> str:
        return """You are a world-class accessibility assistant that helps students with learning differences like ADHD and dyslexia understand complex topics.

Your goal is to reduce cognitive load by transforming complex text into clear, focused content that is simple and easy to understand.

Please provide a JSON object with:
- summary: A concise summary (2-4 sentences capturing the main ideas)
- bulletPoints: Key bullet points (3-7 points highlighting the most important information)
- eli5: An ELI5 (Explain Like I'm 5) version using simple, everyday language

Be clear, direct, and remove unnecessary complexity while preserving the core meaning. Keep outputs reasonably concise for text-to-speech compatibility (aim for under 8,000 characters total when possible)."""

    async def run(self, input_data: str) -> SimplificationOutput:
        prompt = f"Text to simplify:\n{input_data}"
        return await self.llm.generate_structured(
            prompt,
            self.get_system_prompt(),
            SimplificationOutput,
            max_tokens=3000,
        )
