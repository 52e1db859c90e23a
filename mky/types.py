from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Union


# ---- Aliases for clarity ----
Scope = Dict[str, Any]
# (scope, index, data) -> scope; None means the scope was updated in place
RepeatFn = Callable[[Scope, int, Any], "Scope | None"]
# target name -> dotted path into the current item
BindMap = Mapping[str, str]


class DirectoryType(enum.Enum):
    """Directory roles a template can be resolved from."""
    LAYOUT = "layout"
    VIEW = "view"
    COMPONENT = "component"

    @classmethod
    def parse(cls, value: Union[str, "DirectoryType"]) -> "DirectoryType":
        if isinstance(value, DirectoryType):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown template role '{value}'. Expected one of: "
                f"{', '.join(r.value for r in cls)}"
            ) from None


@dataclass(frozen=True)
class TemplateId:
    """(role, logical name): filesystem lookup key and cache key."""
    role: DirectoryType
    name: str

    @classmethod
    def parse(cls, text: str, default_role: DirectoryType = DirectoryType.VIEW) -> "TemplateId":
        """Parses 'role:name' or a bare name (resolved with default_role)."""
        if ":" in text:
            role, name = text.split(":", 1)
            return cls(DirectoryType.parse(role), name.strip())
        return cls(default_role, text.strip())

    def key(self) -> str:
        return f"{self.role.value}:{self.name}"

    def __str__(self) -> str:
        return self.key()


@dataclass(frozen=True)
class CompiledArtifact:
    """
    Lowered, directly executable form of a template source.

    Attributes:
        template: Originating template (for diagnostics)
        code: Native template text produced by the directive compiler
        compiled_at: Wall-clock time of compilation (seconds since epoch)
    """
    template: TemplateId
    code: str
    compiled_at: float


__all__ = [
    "Scope",
    "RepeatFn",
    "BindMap",
    "DirectoryType",
    "TemplateId",
    "CompiledArtifact",
]
