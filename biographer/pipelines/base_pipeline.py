"""
Biographer Base Pipeline

Abstract base class for step-based pipelines.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Generic, TypeVar
from datetime import datetime
from enum import Enum

from biographer.core.logging_config import get_logger

logger = get_logger("pipelines.base")

InputT = TypeVar('InputT')
OutputT = TypeVar('OutputT')


class PipelineStatus(Enum):
    """Status of a pipeline execution."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PipelineResult(Generic[OutputT]):
    """Result from a pipeline execution."""
    status: PipelineStatus
    output: Optional[OutputT] = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None
    duration_seconds: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status == PipelineStatus.COMPLETED

    def unwrap(self) -> OutputT:
        """Return the output, re-raising the original error on failure."""
        if self.success:
            return self.output
        if self.exception is not None:
            raise self.exception
        raise RuntimeError(self.error or "Pipeline failed")


@dataclass
class PipelineStep:
    """A step in a pipeline."""
    name: str
    description: str


class BasePipeline(ABC, Generic[InputT, OutputT]):
    """
    Abstract base class for processing pipelines.

    Steps run strictly in order, each receiving the previous step's output.
    A failing step stops the run; subclasses can react to the
    failure through `_on_failure`.
    """

    def __init__(self, name: str):
        """
        Initialize the pipeline.

        Args:
            name: Pipeline name
        """
        self.name = name
        self._steps: List[PipelineStep] = []
        self._current_step: int = 0
        self._status = PipelineStatus.PENDING

        self._define_steps()

    @abstractmethod
    def _define_steps(self) -> None:
        """Define the pipeline steps. Override in subclasses."""
        pass

    @abstractmethod
    async def _execute_step(
        self,
        step: PipelineStep,
        input_data: Any,
        context: Dict[str, Any]
    ) -> Any:
        """Execute a single step. Override in subclasses."""
        pass

    async def _on_failure(self, error: BaseException, context: Dict[str, Any]) -> None:
        """Hook called once when a step fails."""
        return None

    async def run(
        self,
        input_data: InputT,
        context: Dict[str, Any] = None
    ) -> PipelineResult[OutputT]:
        """
        Run the pipeline.

        Args:
            input_data: Input data
            context: Additional context shared by all steps

        Returns:
            PipelineResult with output
        """
        context = context if context is not None else {}
        start_time = datetime.now()

        self._status = PipelineStatus.RUNNING
        self._current_step = 0

        logger.info(f"Starting pipeline: {self.name}")

        try:
            current_data = input_data

            for i, step in enumerate(self._steps):
                self._current_step = i
                logger.info(f"{self.name}: step {i + 1}/{len(self._steps)} {step.name} ({step.description})")
                current_data = await self._execute_step(step, current_data, context)

            self._status = PipelineStatus.COMPLETED
            logger.info(f"Pipeline complete: {self.name} ({self._get_duration(start_time):.1f}s)")

            return PipelineResult(
                status=PipelineStatus.COMPLETED,
                output=current_data,
                duration_seconds=self._get_duration(start_time),
                metadata={'steps_completed': len(self._steps)}
            )

        except Exception as e:
            self._status = PipelineStatus.FAILED
            failed_step = self._steps[self._current_step].name if self._steps else None
            logger.error(f"Pipeline failed: {self.name} at {failed_step} - {e}")

            try:
                await self._on_failure(e, context)
            except Exception as hook_error:
                logger.error(f"Failure handler for {self.name} raised: {hook_error}")

            return PipelineResult(
                status=PipelineStatus.FAILED,
                error=str(e),
                exception=e,
                duration_seconds=self._get_duration(start_time),
                metadata={'failed_step': failed_step}
            )

    def _get_duration(self, start_time: datetime) -> float:
        """Get duration since start time."""
        return (datetime.now() - start_time).total_seconds()

    @property
    def status(self) -> PipelineStatus:
        return self._status

    @property
    def steps(self) -> List[PipelineStep]:
        return self._steps.copy()
