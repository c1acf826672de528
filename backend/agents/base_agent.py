from abc import ABC, abstractmethod
from pydantic import BaseModel
from typing import Any, Optional
from config import get_settings
import logging
import time
import asyncio


class AgentStatus:
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    RETRYING = "retrying"


class AgentResult(BaseModel):
    status: str
    output: Optional[dict] = None
    error: Optional[str] = None
    execution_time_seconds: float = 0.0
    retry_count: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == AgentStatus.SUCCESS


class BaseAgent(ABC):
    """
    Base class for Clarify's LLM agents.
    Subclasses implement `run`; `execute` wraps it with retries, backoff and timing
    and never raises: failures come back as an AgentResult with status "failed".
    """

    def __init__(self, name: str, llm_service=None, config: Optional[dict] = None):
        settings = get_settings()
        self.name = name
        self.llm = llm_service
        self.config = config or {}
        self.logger = logging.getLogger(f"agent.{name}")
        self.status = AgentStatus.IDLE
        self.max_retries = self.config.get("max_retries", settings.LLM_MAX_RETRIES)
        self.retry_delay = self.config.get("retry_delay", settings.LLM_RETRY_DELAY)

    async def execute(self, input_data: Any) -> AgentResult:
        start = time.time()
        self.status = AgentStatus.RUNNING
        last_error = "No attempts made"

        for attempt in range(self.max_retries + 1):
            if attempt:
                self.status = AgentStatus.RETRYING
                await asyncio.sleep(self.retry_delay * 2 ** (attempt - 1))

            self.logger.info(f"[{self.name}] Executing (attempt {attempt + 1})")
            try:
                output = await self.validate(await self.run(input_data))
            except Exception as e:
                last_error = str(e)
                self.logger.error(f"[{self.name}] Attempt {attempt + 1} failed: {e}")
                continue

            self.status = AgentStatus.SUCCESS
            return AgentResult(
                status=AgentStatus.SUCCESS,
                output=_as_dict(output),
                execution_time_seconds=time.time() - start,
                retry_count=attempt,
            )

        self.status = AgentStatus.FAILED
        return AgentResult(
            status=AgentStatus.FAILED,
            error=last_error,
            execution_time_seconds=time.time() - start,
            retry_count=self.max_retries + 1,
        )

    @abstractmethod
    async def run(self, input_data: Any) -> Any:
        ...

    async def validate(self, output: Any) -> Any:
        """Hook for extra checks on the model output. Raise to trigger a retry."""
        return output

    def get_system_prompt(self) -> str:
        return ""


def _as_dict(output: Any) -> dict:
    # camelCase aliases are the wire format
    if isinstance(output, BaseModel):
        return output.model_dump(by_alias=True)
    return output
