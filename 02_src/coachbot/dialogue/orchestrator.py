"""Conversation orchestrator: routes each inbound message to the active stage."""

import uuid
from typing import Protocol

from ..clock import IClock
from ..config import Settings
from ..directory import IMemberDirectory
from ..errors import UnknownStageError
from ..event_bus import IEventBus
from ..logging_config import get_logger, reset_user_id, set_user_id
from ..models import BusMessage, InboundMessage, MessageKind, Reply, Session, Topic
from ..output_router import IOutputRouter
from ..scheduling import DeferredScheduler, ReminderEngine
from ..sessions import SessionStore
from ..stages import (
    ESCALATION_STAGE,
    Outcome,
    OutcomeKind,
    StageContext,
    StageRegistry,
    Turn,
)
from ..stages import messages as msg
from ..tracker import ITracker
from .fallback import IFallbackDelegate
from .summary import render_summary

logger = get_logger(__name__)


class IOrchestrator(Protocol):
    """Entry point for every inbound user message."""

    async def process_message(
        self, user_id: str, raw: str, kind: MessageKind = MessageKind.TEXT
    ) -> Reply | None:
        """Run one turn and return the reply (None when nothing is sent)."""
        ...

    async def handle_inbound(self, message: InboundMessage) -> Reply | None:
        """Run one turn and deliver the reply before releasing the user."""
        ...


class Orchestrator:
    """
    Owns the turn loop.

    Every turn for a user runs under that user's lock, so turns are applied
    in arrival order and never interleave. Different users never wait on
    each other.
    """

    def __init__(
        self,
        registry: StageRegistry,
        sessions: SessionStore,
        fallback: IFallbackDelegate,
        scheduler: DeferredScheduler,
        reminders: ReminderEngine,
        output_router: IOutputRouter,
        event_bus: IEventBus,
        tracker: ITracker,
        clock: IClock,
        settings: Settings,
        directory: IMemberDirectory | None = None,
        escalation_stage: str = ESCALATION_STAGE,
    ):
        self._registry = registry
        self._sessions = sessions
        self._fallback = fallback
        self._scheduler = scheduler
        self._reminders = reminders
        self._output_router = output_router
        self._event_bus = event_bus
        self._tracker = tracker
        self._clock = clock
        self._settings = settings
        self._directory = directory
        self._escalation_stage = escalation_stage

        self._reset_words = {w.casefold() for w in settings.reset_keywords}
        self._escalation_words = {w.casefold() for w in settings.escalation_keywords}
        self._summary_words = {w.casefold() for w in settings.summary_keywords}

    async def process_message(
        self, user_id: str, raw: str, kind: MessageKind = MessageKind.TEXT
    ) -> Reply | None:
        async with self._sessions.lock(user_id):
            return await self._run_turn(user_id, raw, kind)

    async def handle_inbound(self, message: InboundMessage) -> Reply | None:
        async with self._sessions.lock(message.user_id):
            reply = await self._run_turn(message.user_id, message.body, message.kind)
            if reply is not None:
                await self._output_router.deliver(message.user_id, reply, source="orchestrator")
            return reply

    async def _run_turn(self, user_id: str, raw: str, kind: MessageKind) -> Reply | None:
        token = set_user_id(user_id)
        try:
            session = self._sessions.get_or_create(user_id)
            now = self._clock.now()
            turn = Turn.from_raw(raw, kind)
            ctx = StageContext(
                user_id=user_id,
                profile=session.profile,
                now=now,
                settings=self._settings,
                directory=self._directory,
            )

            logger.info("Message received in stage %s: %s", session.current_stage, turn.text[:100])
            await self._tracker.track(
                event_type="message_received",
                actor="orchestrator",
                data={
                    "user_id": user_id,
                    "stage": session.current_stage,
                    "kind": kind.value,
                    "message_text": turn.text,
                },
            )

            was_armed = self._reminders.is_armed(user_id)
            reply, expects_reply = await self._dispatch(session, turn, ctx)

            # None: the turn left the stage waiting where it was
            if expects_reply is None:
                expects_reply = was_armed
            session.last_interaction_at = now
            self._reminders.clear(user_id)
            if reply is not None and expects_reply:
                self._reminders.arm(user_id, now)

            await self._record_turn(session, turn, reply)
            return reply
        finally:
            reset_user_id(token)

    async def _dispatch(
        self, session: Session, turn: Turn, ctx: StageContext
    ) -> tuple[Reply | None, bool | None]:
        stage = self._registry.get(session.current_stage)
        sub = session.stage_data.setdefault(stage.name, stage.new_sub_session())

        if not turn.text:
            return await self._apply(session, turn, ctx, stage.resume(sub, ctx))

        if turn.folded in self._reset_words:
            return await self._reset(session, ctx)

        if turn.folded in self._escalation_words and self._escalation_stage in self._registry:
            return await self._escalate(session, ctx)

        if turn.folded in self._summary_words:
            return Reply(render_summary(session, ctx.now)), None

        try:
            outcome = await stage.accept(turn, sub, ctx)
        except Exception as e:
            logger.error("Stage %s failed: %s", stage.name, e, exc_info=True)
            text = msg.STAGE_ERROR.format(reset_keyword=self._settings.reset_keywords[0])
            return Reply(text), None

        return await self._apply(session, turn, ctx, outcome)

    async def _apply(
        self, session: Session, turn: Turn, ctx: StageContext, outcome: Outcome
    ) -> tuple[Reply | None, bool | None]:
        await self._side_effects(session, ctx, outcome)

        if outcome.kind == OutcomeKind.REPLY:
            return outcome.reply, outcome.expects_reply

        if outcome.kind == OutcomeKind.ABSORB:
            logger.debug("Turn absorbed in stage %s", session.current_stage)
            return None, False

        if outcome.kind == OutcomeKind.HANDOFF:
            if outcome.next_stage in self._registry:
                return await self._handoff(session, ctx, outcome)
            if self._settings.strict_handoffs:
                raise UnknownStageError(outcome.next_stage, self._registry.names())
            logger.warning(
                "Stage %s handed off to unknown stage %s, using fallback",
                session.current_stage,
                outcome.next_stage,
            )

        return await self._use_fallback(session, turn)

    async def _handoff(
        self, session: Session, ctx: StageContext, outcome: Outcome
    ) -> tuple[Reply | None, bool]:
        previous = session.current_stage
        target = self._registry.get(outcome.next_stage)
        session.profile.update(outcome.carry)
        session.current_stage = target.name

        existing = session.stage_data.get(target.name)
        if outcome.resume and existing is not None:
            entry = target.resume(existing, ctx)
        else:
            sub = target.new_sub_session()
            session.stage_data[target.name] = sub
            entry = target.enter(sub, ctx)
        await self._side_effects(session, ctx, entry)

        logger.info("Handoff %s -> %s", previous, target.name)
        await self._tracker.track(
            event_type="stage_handoff",
            actor="orchestrator",
            data={
                "user_id": session.user_id,
                "from_stage": previous,
                "to_stage": target.name,
                "resume": outcome.resume,
                "carry": outcome.carry,
            },
        )

        texts = [r.text for r in (outcome.reply, entry.reply) if r is not None and r.text]
        buttons = entry.reply.buttons if entry.reply is not None else []
        if not texts:
            return None, False
        return Reply("\n\n".join(texts), list(buttons)), entry.expects_reply

    async def _reset(self, session: Session, ctx: StageContext) -> tuple[Reply | None, bool]:
        entry_stage = self._registry.get(self._registry.entry)
        sub = entry_stage.new_sub_session()
        session.current_stage = entry_stage.name
        session.stage_data = {entry_stage.name: sub}
        session.history.clear()
        dropped = self._scheduler.discard(session.user_id)

        logger.info("Session reset (%d deferred message(s) dropped)", dropped)
        await self._tracker.track(
            event_type="session_reset",
            actor="orchestrator",
            data={"user_id": session.user_id, "deferred_dropped": dropped},
        )

        outcome = entry_stage.enter(sub, ctx)
        return outcome.reply, outcome.expects_reply

    async def _escalate(self, session: Session, ctx: StageContext) -> tuple[Reply | None, bool]:
        stage = self._registry.get(self._escalation_stage)
        if session.current_stage == stage.name:
            outcome = stage.resume(session.stage_data[stage.name], ctx)
            return outcome.reply, outcome.expects_reply

        sub = stage.new_sub_session()
        sub["return_to"] = session.current_stage
        session.stage_data[stage.name] = sub
        previous = session.current_stage
        session.current_stage = stage.name

        await self._tracker.track(
            event_type="stage_handoff",
            actor="orchestrator",
            data={
                "user_id": session.user_id,
                "from_stage": previous,
                "to_stage": stage.name,
                "resume": False,
                "carry": {},
            },
        )
        outcome = stage.enter(sub, ctx)
        return outcome.reply, outcome.expects_reply

    async def _use_fallback(self, session: Session, turn: Turn) -> tuple[Reply | None, None]:
        text = await self._fallback.generate(session, turn.text)
        await self._tracker.track(
            event_type="fallback_used",
            actor="orchestrator",
            data={"user_id": session.user_id, "stage": session.current_stage},
        )
        return Reply(text), None

    async def _side_effects(self, session: Session, ctx: StageContext, outcome: Outcome) -> None:
        """Schedule deferred replies and trace captured answers."""
        for request in outcome.deferred:
            deliver_at = ctx.now + request.delay
            self._scheduler.schedule(session.user_id, request.reply, deliver_at)
            await self._tracker.track(
                event_type="deferred_scheduled",
                actor="orchestrator",
                data={
                    "user_id": session.user_id,
                    "deliver_at": deliver_at.isoformat(),
                    "text": request.reply.text[:100],
                },
            )

        if outcome.captured:
            await self._tracker.track(
                event_type="answer_captured",
                actor="orchestrator",
                data={
                    "user_id": session.user_id,
                    "stage": session.current_stage,
                    "answers": outcome.captured,
                },
            )

    async def _record_turn(self, session: Session, turn: Turn, reply: Reply | None) -> None:
        await self._tracker.track(
            event_type="message_responded",
            actor="orchestrator",
            data={
                "user_id": session.user_id,
                "stage": session.current_stage,
                "response_text": reply.text if reply else None,
            },
        )
        await self._event_bus.publish(
            BusMessage(
                id=str(uuid.uuid4()),
                topic=Topic.TURN,
                payload={
                    "user_id": session.user_id,
                    "stage": session.current_stage,
                    "text": turn.text,
                    "reply": reply.to_dict() if reply else None,
                },
                source="orchestrator",
                timestamp=self._clock.now(),
            )
        )
