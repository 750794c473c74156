"""
Step Registry.

Static, ordered definitions of the pages of a guided flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

import structlog

from agentflow.exceptions import StepNotFoundError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StepDefinition:
    """
    One page of a wizard.

    Attributes:
        id: Unique, ordered step id
        title: Display title
        required_fields: Fields that must be non-empty to complete the step
        description: Short help text shown under the title
        fields: Every field the step collects, required ones included
    """

    id: int
    title: str
    required_fields: FrozenSet[str] = field(default_factory=frozenset)
    description: str = ""
    fields: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_fields", frozenset(self.required_fields))
        collected = list(self.fields)
        for name in sorted(self.required_fields):
            if name not in collected:
                collected.append(name)
        object.__setattr__(self, "fields", tuple(collected))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "required_fields": sorted(self.required_fields),
            "fields": list(self.fields),
        }


class StepRegistry:
    """
    Ordered, read-only collection of step definitions.

    Step order is fixed at construction (ascending id); there is no
    dynamic reordering.
    """

    def __init__(self, steps: Iterable[StepDefinition]):
        ordered = sorted(steps, key=lambda s: s.id)
        if not ordered:
            raise ValueError("A wizard needs at least one step")

        self._by_id: Dict[int, StepDefinition] = {}
        for step in ordered:
            if step.id in self._by_id:
                raise ValueError(f"Duplicate step id: {step.id}")
            self._by_id[step.id] = step

        self._steps: Tuple[StepDefinition, ...] = tuple(ordered)
        self._ids: Tuple[int, ...] = tuple(s.id for s in ordered)

        logger.debug("step_registry_built", steps=len(self._steps))

    def get_steps(self) -> Tuple[StepDefinition, ...]:
        """Get all steps in order."""
        return self._steps

    def get_step(self, step_id: int) -> StepDefinition:
        """
        Get a step by id.

        Raises:
            StepNotFoundError: If no step has that id
        """
        try:
            return self._by_id[step_id]
        except (KeyError, TypeError):
            raise StepNotFoundError(step_id=step_id) from None

    def has_step(self, step_id: int) -> bool:
        try:
            return step_id in self._by_id
        except TypeError:
            return False

    @property
    def ids(self) -> Tuple[int, ...]:
        return self._ids

    @property
    def first_step(self) -> StepDefinition:
        return self._steps[0]

    @property
    def last_step(self) -> StepDefinition:
        return self._steps[-1]

    def index_of(self, step_id: int) -> int:
        """Zero-based position of a step."""
        self.get_step(step_id)
        return self._ids.index(step_id)

    def next_step_id(self, step_id: int) -> Optional[int]:
        """Id of the step after ``step_id``, None at the last step."""
        index = self.index_of(step_id)
        if index + 1 < len(self._ids):
            return self._ids[index + 1]
        return None

    def previous_step_id(self, step_id: int) -> Optional[int]:
        """Id of the step before ``step_id``, None at the first step."""
        index = self.index_of(step_id)
        if index > 0:
            return self._ids[index - 1]
        return None

    def fields_for(self, step_id: int) -> Tuple[str, ...]:
        return self.get_step(step_id).fields

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"StepRegistry(steps={list(self._ids)})"
