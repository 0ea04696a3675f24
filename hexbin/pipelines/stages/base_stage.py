# hexbin/pipelines/stages/base_stage.py
"""Base class for pipeline stages."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class StageStatus(Enum):
    """Stage execution status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class StageResult:
    """Result from stage execution."""
    success: bool
    data: Dict[str, Any]
    metrics: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)
    execution_time: float = 0.0
    memory_delta_mb: float = 0.0


class PipelineStage(ABC):
    """
    Abstract base class for pipeline stages.

    Each stage represents a discrete step with:
    - Dependencies on other stages
    - Parameter validation, run before any stage executes
    - Execution logic that reads and writes the shared context
    """

    def __init__(self):
        self.status = StageStatus.PENDING
        self.error: Optional[str] = None
        self.result: Optional[StageResult] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this stage."""
        pass

    @property
    @abstractmethod
    def dependencies(self) -> List[str]:
        """List of stage names this stage depends on."""
        pass

    def validate(self, context):
        """
        Check the request parameters this stage consumes.

        Raises:
            ValidationError: if a parameter is malformed
        """
        pass

    @abstractmethod
    def execute(self, context) -> StageResult:
        """
        Execute the stage.

        Args:
            context: PipelineContext with the request and shared data

        Returns:
            StageResult with outputs and metrics
        """
        pass

    def reset(self):
        self.status = StageStatus.PENDING
        self.error = None
        self.result = None
