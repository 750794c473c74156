"""
AgentFlow

Wizard engine behind the AgentFlow dashboard's guided flows (business
onboarding and agent creation): step sequencing, per-step validation,
progressive persistence and resume.

Example:
    >>> from agentflow import AsyncAgentFlowClient, HttpPersistenceGateway, NavigationController
    >>> from agentflow.wizard import business_onboarding_registry
    >>> async with AsyncAgentFlowClient(api_key="your-api-key") as client:
    ...     wizard = NavigationController(
    ...         business_onboarding_registry(),
    ...         HttpPersistenceGateway(client),
    ...     )
    ...     await wizard.resume()
    ...     wizard.state.set_field("companyName", "Acme")
"""

__version__ = "1.0.0"

from agentflow.client import AsyncAgentFlowClient
from agentflow.config import Settings, WizardFlow, get_settings
from agentflow.exceptions import (
    AgentFlowError,
    AuthenticationError,
    InvalidSnapshotError,
    InvalidStateError,
    NavigationError,
    NetworkError,
    PersistenceError,
    ServerError,
    StepNotFoundError,
    TransitionInProgressError,
    ValidationError,
)
from agentflow.wizard import (
    HttpPersistenceGateway,
    InMemoryPersistenceGateway,
    NavigationController,
    PersistenceGateway,
    StepDefinition,
    StepRegistry,
    WizardSnapshot,
    WizardState,
)

__all__ = [
    # Client
    "AsyncAgentFlowClient",

    # Config
    "Settings",
    "WizardFlow",
    "get_settings",

    # Wizard
    "HttpPersistenceGateway",
    "InMemoryPersistenceGateway",
    "NavigationController",
    "PersistenceGateway",
    "StepDefinition",
    "StepRegistry",
    "WizardSnapshot",
    "WizardState",

    # Exceptions
    "AgentFlowError",
    "AuthenticationError",
    "InvalidSnapshotError",
    "InvalidStateError",
    "NavigationError",
    "NetworkError",
    "PersistenceError",
    "ServerError",
    "StepNotFoundError",
    "TransitionInProgressError",
    "ValidationError",
]
