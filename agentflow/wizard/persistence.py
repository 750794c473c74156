"""
Persistence Gateway.

Abstraction over the save/load API of a wizard. Every operation is one
network round trip; failures surface as NetworkError or ServerError and
never touch the caller's in-memory state.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import structlog

from agentflow.client import AsyncAgentFlowClient
from agentflow.config import Endpoints
from agentflow.exceptions import ServerError
from agentflow.wizard.state import WizardSnapshot
from agentflow.wizard.steps import StepRegistry

logger = structlog.get_logger(__name__)


class PersistenceGateway(ABC):
    """Async save/load contract used by the navigation controller."""

    @abstractmethod
    async def save_step_data(self, step_id: int, partial_field_values: Mapping[str, Any]) -> None:
        """Persist in-progress values for a step. Overwrites, never appends."""

    @abstractmethod
    async def complete_step(self, step_id: int) -> None:
        """Persist that a step is finished. Idempotent."""

    @abstractmethod
    async def complete_wizard(self) -> None:
        """Signal that the whole flow is done. Idempotent server-side."""

    @abstractmethod
    async def load_state(self) -> Optional[WizardSnapshot]:
        """Fetch the last persisted snapshot, None when the flow was never started."""


# =============================================================================
# HTTP GATEWAY
# =============================================================================


class HttpPersistenceGateway(PersistenceGateway):
    """
    Gateway backed by the AgentFlow REST API.

    Args:
        client: API client owning base URL, auth and timeouts
        base_path: Prefix of the flow's endpoints, e.g. ``/api/onboarding``

    Example:
        >>> async with AsyncAgentFlowClient(api_key="...") as client:
        ...     gateway = HttpPersistenceGateway(client)
        ...     snapshot = await gateway.load_state()
    """

    def __init__(self, client: AsyncAgentFlowClient, base_path: str = "/api/onboarding"):
        self._client = client
        self._base_path = base_path.rstrip("/")

    @property
    def base_path(self) -> str:
        return self._base_path

    def _path(self, endpoint: str) -> str:
        return f"{self._base_path}{endpoint}"

    async def save_step_data(self, step_id: int, partial_field_values: Mapping[str, Any]) -> None:
        await self._client.request(
            "POST",
            self._path(Endpoints.SAVE_STEP),
            json={"step": step_id, "stepData": dict(partial_field_values)},
        )
        logger.debug("step_data_saved", step_id=step_id, fields=sorted(partial_field_values))

    async def complete_step(self, step_id: int) -> None:
        await self._client.request(
            "POST",
            self._path(Endpoints.COMPLETE_STEP),
            json={"step": step_id},
        )
        logger.debug("step_completion_saved", step_id=step_id)

    async def complete_wizard(self) -> None:
        await self._client.request("POST", self._path(Endpoints.COMPLETE))
        logger.info("wizard_completion_saved", base_path=self._base_path)

    async def load_state(self) -> Optional[WizardSnapshot]:
        try:
            payload = await self._client.request("GET", self._path(Endpoints.STATE))
        except ServerError as e:
            if e.status_code == 404:
                logger.debug("no_prior_wizard_state", base_path=self._base_path)
                return None
            raise

        if not payload:
            return None
        return WizardSnapshot.from_api(payload)


# =============================================================================
# IN-MEMORY GATEWAY
# =============================================================================


@dataclass
class InMemoryPersistenceGateway(PersistenceGateway):
    """
    Gateway keeping state in process, with the server's semantics.

    Step data is overwritten per step, completions are a set, and the
    completion flag is sticky. Every call is appended to ``calls`` so
    tests can assert on the exact sequence of requests.

    The persisted current step is the last step saved; when a registry is
    given, completing that step moves it on to the following step.
    """

    registry: Optional[StepRegistry] = None
    step_data: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    completed_steps: Set[int] = field(default_factory=set)
    current_step: Optional[int] = None
    wizard_completed: bool = False
    calls: List[Tuple[str, Any]] = field(default_factory=list)

    async def save_step_data(self, step_id: int, partial_field_values: Mapping[str, Any]) -> None:
        self.calls.append(("save_step_data", step_id))
        self.step_data[step_id] = copy.deepcopy(dict(partial_field_values))
        self.current_step = step_id

    async def complete_step(self, step_id: int) -> None:
        self.calls.append(("complete_step", step_id))
        self.completed_steps.add(step_id)
        if self.registry is not None and self.current_step in (None, step_id):
            following = self.registry.next_step_id(step_id)
            if following is not None:
                self.current_step = following

    async def complete_wizard(self) -> None:
        self.calls.append(("complete_wizard", None))
        self.wizard_completed = True

    async def load_state(self) -> Optional[WizardSnapshot]:
        self.calls.append(("load_state", None))
        if self.current_step is None:
            return None

        merged: Dict[str, Any] = {}
        for step_id in sorted(self.step_data):
            merged.update(copy.deepcopy(self.step_data[step_id]))

        return WizardSnapshot(
            current_step_id=self.current_step,
            field_values=merged,
            completed_step_ids=frozenset(self.completed_steps),
        )

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]
