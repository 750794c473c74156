# Multi-step wizard engine
# Step sequencing, validation, persistence and resume for guided flows

from agentflow.wizard.steps import StepDefinition, StepRegistry
from agentflow.wizard.state import WizardSnapshot, WizardState, is_blank
from agentflow.wizard.persistence import (
    PersistenceGateway,
    HttpPersistenceGateway,
    InMemoryPersistenceGateway,
)
from agentflow.wizard.navigation import (
    NavigationController,
    StepProgress,
    StepStatus,
    TransitionEvent,
    TransitionListener,
)
from agentflow.wizard.catalog import (
    agent_wizard_registry,
    business_onboarding_registry,
    registry_for,
)

__all__ = [
    # Steps
    "StepDefinition",
    "StepRegistry",
    # State
    "WizardSnapshot",
    "WizardState",
    "is_blank",
    # Persistence
    "PersistenceGateway",
    "HttpPersistenceGateway",
    "InMemoryPersistenceGateway",
    # Navigation
    "NavigationController",
    "StepProgress",
    "StepStatus",
    "TransitionEvent",
    "TransitionListener",
    # Catalogs
    "agent_wizard_registry",
    "business_onboarding_registry",
    "registry_for",
]
