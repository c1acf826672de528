import logging
import time
from typing import Callable
from agents.base_agent import AgentResult
from agents.simplification_agent import SimplificationAgent
from agents.translation_agent import TranslationAgent
from agents.key_terms_agent import KeyTermsAgent
from models.content import KeyTerm, SimplifiedContent
from models.language import DEFAULT_LANGUAGE
from models.session import ReadingSession, StageState
from services.pdf_exporter import export_pdf
from services.speech_service import MAX_AUDIO_CHARACTERS, SpeechService

logger = logging.getLogger("orchestrator")


class Orchestrator:
    """
    Runs a reading session end to end:
    simplify → translate → explain key terms → speak → export.
    Only a failed simplification stops the run; later stages record their
    failure and the pipeline carries on.
    """

    STAGES = [
        "simplifying",
        "translating",
        "explaining_terms",
        "generating_audio",
        "exporting_pdf",
    ]

    def __init__(self, llm_service, agent_config: dict | None = None):
        self.llm = llm_service
        self.agents = {
            "simplification": SimplificationAgent(llm_service, agent_config),
            "translation": TranslationAgent(llm_service, agent_config),
            "key_terms": KeyTermsAgent(llm_service, agent_config),
        }
        self.speech = SpeechService(llm_service)
        self.results: dict[str, AgentResult] = {}
        self.progress_callbacks: list[Callable] = []

    def on_progress(self, callback: Callable):
        self.progress_callbacks.append(callback)

    async def _emit(self, session: ReadingSession, stage: str, status: str, detail: str = ""):
        session.pipeline[stage] = StageState(status=status, detail=detail)
        for cb in self.progress_callbacks:
            try:
                await cb({
                    "stage": stage,
                    "status": status,
                    "detail": detail,
                    "pipeline": {k: v.model_dump() for k, v in session.pipeline.items()},
                })
            except Exception as e:
                logger.error(f"Progress callback error: {e}")

    async def run_pipeline(
        self,
        session: ReadingSession,
        target_language: str = DEFAULT_LANGUAGE,
        explain_terms: bool = False,
        speak: bool = False,
        export: bool = True,
    ) -> ReadingSession:
        """Execute the full reading pipeline against a session that already holds validated input text."""
        start_time = time.time()
        session.status = "processing"
        for stage in self.STAGES:
            session.pipeline[stage] = StageState()

        # STAGE 1: Simplification
        await self._emit(session, "simplifying", "running", "Simplifying text...")
        result = await self.agents["simplification"].execute(session.input_text)
        self.results["simplification"] = result
        if not result.succeeded:
            await self._emit(session, "simplifying", "failed", result.error or "")
            session.status = "failed"
            return session
        session.set_simplified(SimplifiedContent.model_validate(result.output))
        await self._emit(session, "simplifying", "done", "✓")

        # STAGE 2: Translation
        session.set_language(target_language)
        if target_language == DEFAULT_LANGUAGE:
            await self._emit(session, "translating", "skipped", "Content is already in English")
        else:
            await self._emit(session, "translating", "running", f"Translating to {target_language}...")
            result = await self.agents["translation"].execute({
                "content": session.simplified,
                "target_language": target_language,
            })
            self.results["translation"] = result
            if result.succeeded:
                session.translated = SimplifiedContent.model_validate(result.output)
                await self._emit(session, "translating", "done", "✓")
            else:
                await self._emit(session, "translating", "failed", result.error or "")

        # STAGE 3: Key terms
        if explain_terms:
            await self._emit(session, "explaining_terms", "running", "Explaining key terms...")
            result = await self.agents["key_terms"].execute({
                "content": session.display_content,
                "original_text": session.input_text,
                "language": session.language,
            })
            self.results["key_terms"] = result
            if result.succeeded:
                session.key_terms = [KeyTerm(**t) for t in result.output.get("terms", [])]
                await self._emit(session, "explaining_terms", "done", "✓")
            else:
                await self._emit(session, "explaining_terms", "failed", result.error or "")
        else:
            await self._emit(session, "explaining_terms", "skipped", "Not requested")

        # STAGE 4: Audio
        await self._generate_audio(session, speak)

        # STAGE 5: PDF export
        if export:
            await self._emit(session, "exporting_pdf", "running", "Building PDF...")
            try:
                session.pdf = export_pdf(session.display_content, session.key_terms)
                await self._emit(session, "exporting_pdf", "done", "✓")
            except Exception as e:
                logger.error(f"PDF export failed for session {session.id}: {e}")
                await self._emit(session, "exporting_pdf", "failed", str(e))
        else:
            await self._emit(session, "exporting_pdf", "skipped", "Not requested")

        session.status = "completed"
        logger.info(f"Session {session.id} completed in {time.time() - start_time:.2f}s")
        return session

    async def _generate_audio(self, session: ReadingSession, speak: bool):
        if not speak:
            await self._emit(session, "generating_audio", "skipped", "Not requested")
            return

        if not session.can_play_audio:
            session.audio_skipped_reason = f"Audio is not available for language '{session.language}'"
            await self._emit(session, "generating_audio", "skipped", session.audio_skipped_reason)
            return

        text = session.display_content.speech_text()
        if len(text) > MAX_AUDIO_CHARACTERS:
            session.audio_skipped_reason = (
                f"Audio playback is limited to {MAX_AUDIO_CHARACTERS} characters. "
                f"The simplified content is {len(text)} characters."
            )
            await self._emit(session, "generating_audio", "skipped", session.audio_skipped_reason)
            return

        await self._emit(session, "generating_audio", "running", "Generating audio...")
        try:
            session.audio = await self.speech.synthesize(text, session.language)
            await self._emit(session, "generating_audio", "done", "✓")
        except Exception as e:
            logger.error(f"Audio generation failed for session {session.id}: {e}")
            await self._emit(session, "generating_audio", "failed", str(e))
