"""Shared pytest fixtures for testing."""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

from agentflow.config import get_settings
from agentflow.wizard.navigation import NavigationController
from agentflow.wizard.persistence import InMemoryPersistenceGateway
from agentflow.wizard.state import WizardState
from agentflow.wizard.steps import StepDefinition, StepRegistry


# =============================================================================
# Test Doubles
# =============================================================================


class FlakyGateway(InMemoryPersistenceGateway):
    """In-memory gateway that raises a queued error on a named operation."""

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.failures: Dict[str, List[Exception]] = {}

    def fail_next(self, operation: str, error: Exception) -> "FlakyGateway":
        self.failures.setdefault(operation, []).append(error)
        return self

    def _maybe_fail(self, operation: str) -> None:
        queued = self.failures.get(operation)
        if queued:
            raise queued.pop(0)

    async def save_step_data(self, step_id: int, partial_field_values: Mapping[str, Any]) -> None:
        self._maybe_fail("save_step_data")
        await super().save_step_data(step_id, partial_field_values)

    async def complete_step(self, step_id: int) -> None:
        self._maybe_fail("complete_step")
        await super().complete_step(step_id)

    async def complete_wizard(self) -> None:
        self._maybe_fail("complete_wizard")
        await super().complete_wizard()

    async def load_state(self):
        self._maybe_fail("load_state")
        return await super().load_state()


class BlockingGateway(InMemoryPersistenceGateway):
    """In-memory gateway whose saves wait until ``release`` is set."""

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.entered: Optional[asyncio.Event] = None
        self.release: Optional[asyncio.Event] = None

    def arm(self) -> None:
        """Create the events inside the running loop."""
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def save_step_data(self, step_id: int, partial_field_values: Mapping[str, Any]) -> None:
        if self.release is not None:
            self.entered.set()
            await self.release.wait()
        await super().save_step_data(step_id, partial_field_values)


# =============================================================================
# Registry Fixtures
# =============================================================================


@pytest.fixture
def three_step_registry() -> StepRegistry:
    """Step 1 requires name, step 2 requires email, step 3 requires nothing."""
    return StepRegistry([
        StepDefinition(id=1, title="Basics", required_fields=frozenset({"name"}), fields=("name", "nickname")),
        StepDefinition(id=2, title="Contact", required_fields=frozenset({"email"}), fields=("email", "phone")),
        StepDefinition(id=3, title="Review"),
    ])


@pytest.fixture
def state(three_step_registry: StepRegistry) -> WizardState:
    return WizardState(three_step_registry)


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def gateway(three_step_registry: StepRegistry) -> InMemoryPersistenceGateway:
    return InMemoryPersistenceGateway(registry=three_step_registry)


@pytest.fixture
def flaky_gateway(three_step_registry: StepRegistry) -> FlakyGateway:
    return FlakyGateway(registry=three_step_registry)


@pytest.fixture
def blocking_gateway(three_step_registry: StepRegistry) -> BlockingGateway:
    return BlockingGateway(registry=three_step_registry)


# =============================================================================
# Controller Fixtures
# =============================================================================


@pytest.fixture
def controller(three_step_registry: StepRegistry, gateway: InMemoryPersistenceGateway) -> NavigationController:
    return NavigationController(three_step_registry, gateway)


@pytest.fixture
def flaky_controller(three_step_registry: StepRegistry, flaky_gateway: FlakyGateway) -> NavigationController:
    return NavigationController(three_step_registry, flaky_gateway)


@pytest.fixture
def blocking_controller(three_step_registry: StepRegistry, blocking_gateway: BlockingGateway) -> NavigationController:
    return NavigationController(three_step_registry, blocking_gateway)


@pytest.fixture
def make_blocking_controller():
    """Build a controller over a blocking gateway for any registry."""
    def _make(registry: StepRegistry) -> Tuple[NavigationController, BlockingGateway]:
        gateway = BlockingGateway(registry=registry)
        return NavigationController(registry, gateway), gateway

    return _make


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from AGENTFLOW_* variables and the settings cache."""
    for name in ("AGENTFLOW_API_KEY", "AGENTFLOW_API_BASE_URL", "AGENTFLOW_ORGANIZATION_ID"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
