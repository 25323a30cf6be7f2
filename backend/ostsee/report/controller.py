# backend/ostsee/report/controller.py
from dataclasses import dataclass, field
from typing import Optional

from ostsee.report.steps import FORM_STEPS, FormStep
from ostsee.report.validation import DEFAULT_SCHEMA, FieldError, ValidationSchema
from ostsee.schemas.report import SightingDraft


@dataclass
class StepOutcome:
    moved: bool
    current_step: int
    errors: list[FieldError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "moved": self.moved,
            "current_step": self.current_step,
            "errors": [e.to_dict() for e in self.errors],
        }


class StepController:
    """Cursor over the form steps plus the set of steps that passed validation."""

    def __init__(self, steps: tuple[FormStep, ...] = FORM_STEPS,
                 schema: ValidationSchema = DEFAULT_SCHEMA,
                 current: int = 0, completed: Optional[set[int]] = None):
        if not steps:
            raise ValueError("at least one step is required")
        self.steps = steps
        self.schema = schema
        self.current = max(0, min(current, len(steps) - 1))
        self.completed: set[int] = {i for i in (completed or set()) if 0 <= i < len(steps)}
        self.submitted = False

    @classmethod
    def from_draft(cls, draft: SightingDraft, **kw) -> "StepController":
        return cls(current=draft.current_step, completed=set(draft.completed_steps), **kw)

    def apply_to(self, draft: SightingDraft) -> None:
        draft.current_step = self.current
        draft.completed_steps = sorted(self.completed)

    @property
    def step(self) -> FormStep:
        return self.steps[self.current]

    @property
    def is_last(self) -> bool:
        return self.current == len(self.steps) - 1

    def revalidate(self, index: int, values: dict) -> list[FieldError]:
        errors = self.schema.validate_step(self.steps[index], values)
        if errors:
            self.completed.discard(index)
        else:
            self.completed.add(index)
        return errors

    def next(self, values: dict) -> StepOutcome:
        errors = self.revalidate(self.current, values)
        if errors and not self.step.optional:
            return StepOutcome(False, self.current, errors)
        if self.is_last:
            return StepOutcome(False, self.current, errors)
        self.current += 1
        return StepOutcome(True, self.current, errors)

    def back(self) -> StepOutcome:
        if self.current == 0:
            return StepOutcome(False, self.current)
        self.current -= 1
        return StepOutcome(True, self.current)

    def can_go_to(self, index: int) -> bool:
        if not 0 <= index < len(self.steps):
            return False
        return all(i in self.completed or self.steps[i].optional for i in range(index))

    def go_to(self, index: int) -> bool:
        if not self.can_go_to(index):
            return False
        self.current = index
        return True

    def is_ready(self, values: dict) -> bool:
        return self.is_last and not self.schema.validate_full(values)

    def mark_submitted(self) -> None:
        self.submitted = True
        self.completed = set(range(len(self.steps)))

    def snapshot(self) -> dict:
        return {
            "current_step": self.current,
            "step_id": self.step.id,
            "completed_steps": sorted(self.completed),
            "submitted": self.submitted,
            "steps": [
                dict(s.to_dict(), reachable=self.can_go_to(i), completed=i in self.completed)
                for i, s in enumerate(self.steps)
            ],
        }
