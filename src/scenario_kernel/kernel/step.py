from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from scenario_kernel.kernel.context import ScenarioContext
from scenario_kernel.kernel.resolution import STEP_ID, Param


class Step(ABC):
    """A unit of scenario setup work.

    Identity is the step id alone: two instances with the same id are the same
    step as far as a context's history is concerned. ``fire`` runs ``execute``
    at most once per context.
    """

    # Constructor declaration consumed by StepFactory; subclasses extend it when they take more.
    parameters: ClassVar[tuple[Param, ...]] = (STEP_ID,)

    def __init__(self, step_id: str) -> None:
        if not isinstance(step_id, str) or not step_id:
            raise ValueError("step_id must be a non-empty string")
        self._step_id = step_id

    @property
    def step_id(self) -> str:
        return self._step_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Step):
            return NotImplemented
        return self._step_id == other._step_id

    def __hash__(self) -> int:
        return hash(self._step_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(step_id={self._step_id!r})"

    @abstractmethod
    async def execute(self, context: ScenarioContext) -> None:
        raise NotImplementedError

    async def fire(self, context: ScenarioContext) -> None:
        if context.has_fired(self._step_id):
            context.emit_log("DEBUG", "step.skipped", step_id=self._step_id)
            return
        await self.execute(context)
        # Only completed steps are recorded; a failing execute leaves history untouched.
        context.record_fired(self._step_id)
        context.emit_log("INFO", "step.completed", step_id=self._step_id, step_type=type(self).__name__)
