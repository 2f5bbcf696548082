"""
Stage registry: name -> stage, validated once at startup.

Stages never import each other; handoffs name their target and the
orchestrator resolves it here at runtime.
"""

from ..errors import StageRegistrationError, UnknownStageError
from ..logging_config import get_logger
from .base import Stage

logger = get_logger(__name__)


class StageRegistry:
    """Registered stages plus the name of the entry stage."""

    def __init__(self, entry: str):
        self._entry = entry
        self._stages: dict[str, Stage] = {}

    @property
    def entry(self) -> str:
        return self._entry

    def register(self, stage: Stage) -> None:
        """Register a stage; names must be unique."""
        if stage.name in self._stages:
            raise StageRegistrationError(f"Stage '{stage.name}' is already registered")
        self._stages[stage.name] = stage
        logger.debug("Stage registered: %s", stage.name)

    def get(self, name: str) -> Stage:
        """
        Get a stage by name.

        Raises:
            UnknownStageError: If the name is not registered.
        """
        if name not in self._stages:
            raise UnknownStageError(name, self.names())
        return self._stages[name]

    def names(self) -> list[str]:
        return list(self._stages.keys())

    def validate(self) -> None:
        """
        Check the graph before serving traffic.

        Raises:
            StageRegistrationError: If the entry stage is missing or a stage
                declares a handoff target that is not registered.
        """
        if self._entry not in self._stages:
            raise StageRegistrationError(
                f"Entry stage '{self._entry}' not registered. Available: {self.names()}"
            )
        for stage in self._stages.values():
            unknown = [t for t in stage.handoff_targets if t not in self._stages]
            if unknown:
                raise StageRegistrationError(
                    f"Stage '{stage.name}' hands off to unregistered stage(s): {unknown}"
                )

    def __contains__(self, name: object) -> bool:
        return name in self._stages

    def __len__(self) -> int:
        return len(self._stages)
