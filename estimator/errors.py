"""
Domain errors raised by the project pipeline.

ProjectValidationError carries every violation found, each with a
human-readable message and the dotted field path it applies to
(e.g. "categories.0.workItems.2.type"), so a client can highlight inputs.
"""

from dataclasses import dataclass

from pydantic import ValidationError


@dataclass(frozen=True)
class Violation:
    path: str
    message: str


class ProjectValidationError(Exception):
    """Structural or taxonomy failure — the whole write is rejected."""

    def __init__(self, violations: list[Violation], summary: str = "Validation failed."):
        self.violations = list(violations)
        self.summary = summary
        super().__init__(f"{summary} " + "; ".join(v.message for v in self.violations))

    @classmethod
    def single(cls, path: str, message: str) -> "ProjectValidationError":
        return cls([Violation(path=path, message=message)])

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    @property
    def paths(self) -> list[str]:
        return [v.path for v in self.violations]

    def to_dict(self) -> dict:
        return {"error": self.summary, "details": self.messages, "paths": self.paths}


class ProjectNotFoundError(Exception):
    """No project with that id belongs to the caller."""

    def __init__(self, project_id):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


def violations_from_pydantic(exc: ValidationError, prefix: str = "") -> list[Violation]:
    violations = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        path = ".".join(p for p in (prefix, loc) if p)
        message = err.get("msg", "Invalid value.")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append(Violation(path=path or prefix, message=message))
    return violations
