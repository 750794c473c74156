"""
Navigation Controller
=====================

State machine driving a wizard over ``{Step_1 .. Step_N, Completed}``.

Every transition validates against the step registry, persists through the
gateway, and only then mutates the in-memory state. A persistence failure
leaves the state exactly as it was so the user can retry without losing
edits. At most one transition runs at a time; a second call made while
one is pending is rejected with TransitionInProgressError.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, List, Optional

import structlog

from agentflow.exceptions import (
    InvalidSnapshotError,
    InvalidStateError,
    NavigationError,
    TransitionInProgressError,
    ValidationError,
)
from agentflow.wizard.persistence import PersistenceGateway
from agentflow.wizard.state import WizardSnapshot, WizardState
from agentflow.wizard.steps import StepDefinition, StepRegistry

logger = structlog.get_logger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================


class StepStatus(str, Enum):
    """Display status of a step in a step indicator."""

    COMPLETED = "completed"
    CURRENT = "current"
    ACCESSIBLE = "accessible"
    LOCKED = "locked"


@dataclass
class StepProgress:
    """Per-step view of the wizard for progress indicators."""

    step: StepDefinition
    status: StepStatus
    completed: bool
    missing_fields: List[str] = field(default_factory=list)


@dataclass
class TransitionEvent:
    """Record of a successful transition, handed to listeners."""

    action: str
    from_step: int
    to_step: Optional[int]
    wizard_completed: bool = False
    duration_ms: float = 0.0
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


TransitionListener = Callable[[TransitionEvent], Awaitable[None]]


# =============================================================================
# CONTROLLER
# =============================================================================


class NavigationController:
    """
    Orchestrates next/prev/jump transitions of one wizard session.

    Usage:
        controller = NavigationController(registry, gateway)
        await controller.resume()

        controller.state.set_field("companyName", "Acme")
        await controller.next()
        await controller.jump_to(1)

    Args:
        registry: Step definitions of the flow
        gateway: Save/load API of the flow
        state: Existing state to drive; a fresh one is created when omitted
    """

    def __init__(
        self,
        registry: StepRegistry,
        gateway: PersistenceGateway,
        state: Optional[WizardState] = None,
    ):
        if state is not None and state.registry is not registry:
            raise ValueError("State was built for a different step registry")

        self._registry = registry
        self._gateway = gateway
        self._state = state or WizardState(registry)
        self._completed = False
        self._disposed = False
        self._in_flight: Optional[str] = None
        self._listeners: List[TransitionListener] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def registry(self) -> StepRegistry:
        return self._registry

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def current_step(self) -> Optional[StepDefinition]:
        """The step being shown, None once the wizard is completed."""
        if self._completed:
            return None
        return self._registry.get_step(self._state.current_step_id)

    @property
    def is_completed(self) -> bool:
        return self._completed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def is_busy(self) -> bool:
        """True while a transition is waiting on the gateway."""
        return self._in_flight is not None

    @property
    def progress(self) -> float:
        """Percentage shown by the progress bar: position of the current step over the total."""
        if self._completed:
            return 100.0
        position = self._registry.index_of(self._state.current_step_id) + 1
        return position / len(self._registry) * 100

    def step_statuses(self) -> List[StepProgress]:
        """Status of every step, in order."""
        statuses = []
        for step in self._registry:
            completed = self._state.is_completed(step.id)
            if self._completed or (completed and step.id != self._state.current_step_id):
                status = StepStatus.COMPLETED
            elif step.id == self._state.current_step_id:
                status = StepStatus.CURRENT
            elif self._state.is_accessible(step.id):
                status = StepStatus.ACCESSIBLE
            else:
                status = StepStatus.LOCKED
            statuses.append(
                StepProgress(
                    step=step,
                    status=status,
                    completed=completed,
                    missing_fields=self._state.missing_fields(step.id),
                )
            )
        return statuses

    def on_transition(self, listener: TransitionListener) -> "NavigationController":
        """Register a telemetry listener called after each successful transition"""
        self._listeners.append(listener)
        return self

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def resume(self) -> Optional[WizardSnapshot]:
        """
        Load the last persisted snapshot and hydrate from it.

        Returns:
            The snapshot used, or None when starting fresh

        Raises:
            NetworkError: If the state could not be fetched
            ServerError: If the API answered with an error status
        """
        async with self._transition("resume"):
            try:
                snapshot = await self._gateway.load_state()
            except InvalidSnapshotError as e:
                return self._fall_back_to_start(e)

            if self._disposed:
                return self._discard("resume")
            if snapshot is None:
                logger.info("wizard_started_fresh", current_step=self._state.current_step_id)
                return None

            try:
                self._state.hydrate(snapshot)
            except InvalidSnapshotError as e:
                return self._fall_back_to_start(e)

            logger.info(
                "wizard_resumed",
                current_step=self._state.current_step_id,
                completed_steps=sorted(self._state.completed_step_ids),
            )
            return snapshot

    def dispose(self) -> None:
        """
        Detach the controller from its host view.

        Results of a pending persistence call are discarded and every later
        call raises InvalidStateError.
        """
        if self._disposed:
            return
        self._disposed = True
        logger.debug("navigation_controller_disposed", pending=self._in_flight)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def next(self) -> Optional[StepDefinition]:
        """
        Complete the current step and advance.

        At the last step this completes the wizard.

        Returns:
            The new current step, None once the wizard is completed

        Raises:
            ValidationError: If required fields of the current step are blank
            NetworkError: If persistence failed in transit
            ServerError: If the API rejected a persistence call
            InvalidStateError: If the wizard is completed or disposed
        """
        async with self._transition("next"):
            step_id = self._state.current_step_id
            missing = self._state.missing_fields(step_id)
            if missing:
                logger.info("step_validation_failed", step_id=step_id, missing_fields=missing)
                raise ValidationError(
                    f"Step {step_id} is missing required fields",
                    step_id=step_id,
                    missing_fields=missing,
                )

            started = time.perf_counter()
            revision = self._state.revision
            following = self._registry.next_step_id(step_id)

            await self._gateway.save_step_data(step_id, self._state.step_payload(step_id))
            if self._disposed:
                return self._discard("next")

            await self._gateway.complete_step(step_id)
            if self._disposed:
                return self._discard("next")

            if following is None:
                await self._gateway.complete_wizard()
                if self._disposed:
                    return self._discard("next")

            self._state.record_completed(step_id)
            self._state.mark_clean(revision)
            if following is None:
                self._completed = True
            else:
                self._state.move_to(following)

            await self._emit("next", step_id, following, started)
            return self.current_step

    async def prev(self) -> Optional[StepDefinition]:
        """
        Save the current step, complete or not, and move back one step.

        Raises:
            NavigationError: If already at the first step
            NetworkError: If persistence failed in transit
            ServerError: If the API rejected the save
            InvalidStateError: If the wizard is completed or disposed
        """
        async with self._transition("prev"):
            step_id = self._state.current_step_id
            previous = self._registry.previous_step_id(step_id)
            if previous is None:
                raise NavigationError("Already at the first step", target_step_id=None)

            started = time.perf_counter()
            if await self._save_current() is None:
                return self._discard("prev")

            self._state.move_to(previous)
            await self._emit("prev", step_id, previous, started)
            return self.current_step

    async def jump_to(self, step_id: int) -> Optional[StepDefinition]:
        """
        Save the current step and go to any accessible step.

        A step is accessible if it is not ahead of the current step or has
        already been completed.

        Raises:
            NavigationError: If the step does not exist or is not accessible
            NetworkError: If persistence failed in transit
            ServerError: If the API rejected the save
            InvalidStateError: If the wizard is completed or disposed
        """
        async with self._transition("jump"):
            if not self._registry.has_step(step_id):
                raise NavigationError(f"Step {step_id} does not exist", target_step_id=step_id)
            if not self._state.is_accessible(step_id):
                raise NavigationError(
                    f"Step {step_id} is not accessible from step {self._state.current_step_id}",
                    target_step_id=step_id,
                )

            origin = self._state.current_step_id
            started = time.perf_counter()
            if await self._save_current() is None:
                return self._discard("jump")

            self._state.move_to(step_id)
            await self._emit("jump", origin, step_id, started)
            return self.current_step

    async def save_progress(self) -> Optional[StepDefinition]:
        """Persist the current step's values without moving."""
        async with self._transition("save_progress"):
            step_id = self._state.current_step_id
            started = time.perf_counter()
            if await self._save_current() is None:
                return self._discard("save_progress")

            await self._emit("save_progress", step_id, step_id, started)
            return self.current_step

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _transition(self, action: str) -> AsyncIterator[None]:
        """Reject calls after completion or disposal, and overlapping calls."""
        if self._disposed:
            logger.error("navigation_after_dispose", action=action)
            raise InvalidStateError(f"Cannot {action}: the wizard has been closed")
        if self._completed:
            logger.error("navigation_after_completion", action=action)
            raise InvalidStateError(f"Cannot {action}: the wizard is already completed")
        if self._in_flight is not None:
            raise TransitionInProgressError(
                f"Cannot {action} while {self._in_flight} is in progress"
            )

        self._in_flight = action
        try:
            yield
        finally:
            self._in_flight = None

    async def _save_current(self) -> Optional[int]:
        """Save the current step's values. Returns None if the result must be discarded."""
        step_id = self._state.current_step_id
        revision = self._state.revision
        await self._gateway.save_step_data(step_id, self._state.step_payload(step_id))
        if self._disposed:
            return None
        self._state.mark_clean(revision)
        return step_id

    def _discard(self, action: str) -> None:
        logger.debug("transition_result_discarded", action=action)
        return None

    def _fall_back_to_start(self, error: InvalidSnapshotError) -> None:
        logger.warning("wizard_snapshot_rejected", error=str(error))
        if not self._disposed:
            self._state.reset()
        return None

    async def _emit(
        self,
        action: str,
        from_step: int,
        to_step: Optional[int],
        started: float,
    ) -> None:
        event = TransitionEvent(
            action=action,
            from_step=from_step,
            to_step=None if self._completed else to_step,
            wizard_completed=self._completed,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        logger.info(
            "wizard_transition",
            action=action,
            from_step=event.from_step,
            to_step=event.to_step,
            completed=event.wizard_completed,
            duration_ms=round(event.duration_ms, 2),
        )

        for listener in self._listeners:
            try:
                await listener(event)
            except Exception:
                logger.warning("transition_listener_failed", action=action, exc_info=True)

    def __repr__(self) -> str:
        return (
            f"NavigationController(current_step={self._state.current_step_id}, "
            f"completed={self._completed})"
        )
