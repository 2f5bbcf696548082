"""Exception types raised inside the coach bot."""


class CoachBotError(Exception):
    """Base class for coach bot errors."""


class StageRegistrationError(CoachBotError):
    """Stage registry is inconsistent (duplicate name, unknown target, no entry stage)."""


class UnknownStageError(CoachBotError):
    """A stage handed off to a name that is not registered."""

    def __init__(self, stage_name: str, registered: list[str]):
        super().__init__(f"Stage '{stage_name}' not registered. Available: {registered}")
        self.stage_name = stage_name


class DirectoryError(CoachBotError):
    """Member directory lookup failed."""


class DeliveryError(CoachBotError):
    """Outbound message was rejected by the transport."""


class LLMError(CoachBotError):
    """LLM provider call failed."""
