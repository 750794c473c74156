"""
Wizard State.

In-memory representation of a guided flow in progress: the current step,
the field values collected across all steps, and the ids of completed
steps. Validation is deferred to step completion; writes are never
rejected.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Set, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic import ValidationError as PydanticValidationError

from agentflow.exceptions import InvalidSnapshotError, ValidationError
from agentflow.wizard.steps import StepRegistry

logger = structlog.get_logger(__name__)


def is_blank(value: Any) -> bool:
    """
    Check whether a field value counts as empty.

    None, whitespace-only strings and empty collections are blank.
    ``0`` and ``False`` are real answers and are not.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


class WizardSnapshot(BaseModel):
    """
    Serializable projection of a wizard state.

    Field names follow Python conventions; the aliases are the keys used by
    the onboarding API (``currentStep``, ``stepData``, ``completedSteps``).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    current_step_id: int = Field(alias="currentStep")
    field_values: Dict[str, Any] = Field(default_factory=dict, alias="stepData")
    completed_step_ids: FrozenSet[int] = Field(default_factory=frozenset, alias="completedSteps")

    @field_serializer("completed_step_ids")
    def _serialize_completed(self, value: FrozenSet[int]) -> List[int]:
        return sorted(value)

    @classmethod
    def from_api(cls, payload: Any) -> "WizardSnapshot":
        """
        Parse an API payload.

        Raises:
            InvalidSnapshotError: If the payload does not describe a snapshot
        """
        if not isinstance(payload, Mapping):
            raise InvalidSnapshotError(f"Expected an object, got {type(payload).__name__}")
        data = dict(payload)
        if data.get("stepData") is None:
            data["stepData"] = {}
        if data.get("completedSteps") is None:
            data["completedSteps"] = []
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise InvalidSnapshotError(f"Malformed snapshot: {e.error_count()} invalid field(s)") from e

    def to_api(self) -> Dict[str, Any]:
        """Dump using the API's key names."""
        return self.model_dump(by_alias=True, mode="json")


class WizardState:
    """
    Current step, accumulated field values and completed steps of a wizard.

    A new state starts at the registry's first step with no values. The
    state never references a step the registry does not know.
    """

    def __init__(self, registry: StepRegistry):
        self._registry = registry
        self._current_step_id: int = registry.first_step.id
        self._field_values: Dict[str, Any] = {}
        self._completed_step_ids: Set[int] = set()
        self._dirty = False
        self._revision = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def registry(self) -> StepRegistry:
        return self._registry

    @property
    def current_step_id(self) -> int:
        return self._current_step_id

    @property
    def field_values(self) -> Dict[str, Any]:
        """Copy of all collected values."""
        return dict(self._field_values)

    @property
    def completed_step_ids(self) -> FrozenSet[int]:
        return frozenset(self._completed_step_ids)

    @property
    def is_dirty(self) -> bool:
        """True when fields changed since the last successful save."""
        return self._dirty

    @property
    def revision(self) -> int:
        """Counter bumped by every field write."""
        return self._revision

    # -------------------------------------------------------------------------
    # Field access
    # -------------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> None:
        """Store a value. No validation happens at write time."""
        self._field_values[name] = value
        self._dirty = True
        self._revision += 1

    def update_fields(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    def get_field(self, name: str, default: Any = None) -> Any:
        return self._field_values.get(name, default)

    def mark_clean(self, revision: Optional[int] = None) -> None:
        """
        Clear the dirty flag.

        When ``revision`` is given the flag is only cleared if no field was
        written after that revision was read.
        """
        if revision is None or revision == self._revision:
            self._dirty = False

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def missing_fields(self, step_id: int) -> List[str]:
        """Required fields of a step that are still blank, sorted."""
        step = self._registry.get_step(step_id)
        return sorted(
            name for name in step.required_fields
            if is_blank(self._field_values.get(name))
        )

    def is_step_complete(self, step_id: int) -> bool:
        """True iff every required field of the step has a non-empty value."""
        return not self.missing_fields(step_id)

    def mark_complete(self, step_id: int) -> None:
        """
        Record a step as completed. Completing a step twice is a no-op.

        Raises:
            ValidationError: If a required field is still blank
            StepNotFoundError: If the step does not exist
        """
        missing = self.missing_fields(step_id)
        if missing:
            raise ValidationError(
                f"Step {step_id} is missing required fields",
                step_id=step_id,
                missing_fields=missing,
            )
        self._completed_step_ids.add(step_id)

    def record_completed(self, step_id: int) -> None:
        """
        Record a completion the server has already accepted.

        Fields are not checked again: they may have been edited while the
        completion was in flight.
        """
        self._registry.get_step(step_id)
        self._completed_step_ids.add(step_id)

    def is_completed(self, step_id: int) -> bool:
        return step_id in self._completed_step_ids

    def is_accessible(self, step_id: int) -> bool:
        """A step can be revisited if it is not ahead of the current one, or was completed."""
        if not self._registry.has_step(step_id):
            return False
        return step_id <= self._current_step_id or step_id in self._completed_step_ids

    # -------------------------------------------------------------------------
    # Navigation support
    # -------------------------------------------------------------------------

    def move_to(self, step_id: int) -> None:
        """Set the current step. Access rules are enforced by the controller."""
        self._registry.get_step(step_id)
        self._current_step_id = step_id

    def step_payload(self, step_id: int) -> Dict[str, Any]:
        """Values of the fields that belong to a step, skipping unset ones."""
        fields = self._registry.fields_for(step_id)
        return {
            name: copy.deepcopy(self._field_values[name])
            for name in fields
            if name in self._field_values
        }

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> WizardSnapshot:
        """Project the state for persistence. Does not mutate anything."""
        return WizardSnapshot(
            current_step_id=self._current_step_id,
            field_values=copy.deepcopy(self._field_values),
            completed_step_ids=frozenset(self._completed_step_ids),
        )

    def hydrate(self, snapshot: Union[WizardSnapshot, Mapping[str, Any]]) -> None:
        """
        Replace the whole state with a snapshot.

        Raises:
            InvalidSnapshotError: If the snapshot references unknown steps.
                The state is left untouched in that case.
        """
        if not isinstance(snapshot, WizardSnapshot):
            snapshot = WizardSnapshot.from_api(snapshot)

        if not self._registry.has_step(snapshot.current_step_id):
            raise InvalidSnapshotError(
                f"Snapshot points at unknown step {snapshot.current_step_id}"
            )
        unknown = sorted(i for i in snapshot.completed_step_ids if not self._registry.has_step(i))
        if unknown:
            raise InvalidSnapshotError(f"Snapshot marks unknown steps as completed: {unknown}")

        self._current_step_id = snapshot.current_step_id
        self._field_values = copy.deepcopy(dict(snapshot.field_values))
        self._completed_step_ids = set(snapshot.completed_step_ids)
        self._dirty = False

        logger.debug(
            "wizard_state_hydrated",
            current_step=self._current_step_id,
            completed_steps=sorted(self._completed_step_ids),
        )

    def reset(self) -> None:
        """Go back to the first step with no values."""
        self._current_step_id = self._registry.first_step.id
        self._field_values = {}
        self._completed_step_ids = set()
        self._dirty = False

    def __repr__(self) -> str:
        return (
            f"WizardState(current_step_id={self._current_step_id}, "
            f"completed_step_ids={sorted(self._completed_step_ids)})"
        )
