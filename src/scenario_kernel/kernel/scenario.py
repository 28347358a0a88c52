from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields

from scenario_kernel.kernel.context import ScenarioContext
from scenario_kernel.kernel.errors import DeclarationError


@dataclass
class Scenario:
    """Root outcome of a scenario build.

    Concrete scenarios are dataclasses whose fields are named after the step
    ids (or derived child ids) that write them. After a build, every context
    variable whose name equals a field name is copied onto that field.
    """

    context: ScenarioContext | None = field(default_factory=ScenarioContext, repr=False, compare=False)

    @classmethod
    def projected_fields(cls) -> tuple[str, ...]:
        # Inherited dataclass fields would hide the subclass annotations from projection.
        if "__dataclass_fields__" not in cls.__dict__:
            raise DeclarationError(f"{cls.__name__} must be decorated with @dataclass to receive context variables")
        return tuple(f.name for f in fields(cls) if f.name != "context")

    def apply_variables(self, variables: Mapping[str, object]) -> list[str]:
        # Match by exact name; variables without a matching field are ignored.
        targets = set(self.projected_fields())
        projected: list[str] = []
        for name, value in variables.items():
            if name in targets:
                setattr(self, name, value)
                projected.append(name)
        return projected
