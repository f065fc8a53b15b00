"""Base contract shared by the first-class OneLine models.

`Artifact` is a small typed envelope carrying:

- `kind`   : a dotted machine label such as ``"timeline_result.v1"``;
- `version`: a semantic *schema* version string (e.g. ``"1.0.0"``).

Versioning
----------
Backward-compatible additive changes bump the *minor* version; breaking
changes bump the *major* version.

Immutability
------------
Every contract is frozen. A new query produces a new `TimelineResult`; nothing
downstream (filtering, sorting, rendering) edits records in place, so readers
can always assume a fully formed snapshot.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

Semver = Annotated[
    str,
    Field(
        pattern=r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:[-+][0-9A-Za-z\.-]+)?$",
        description="Semantic version (MAJOR.MINOR.PATCH), optional pre-release/build.",
    ),
]


class Artifact(BaseModel):
    """Base envelope embedded by all content contracts."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(description="Short machine label, e.g. 'timeline_result.v1'")
    version: Semver = Field(default="1.0.0", description="Schema version (semver)")

    @field_validator("kind")
    @classmethod
    def _must_have_dot(cls, v: str) -> str:
        """Encourage a `<name>.v<major>` style for portability."""
        if "." not in v:
            raise ValueError("kind should include a dotted suffix, e.g., 'timeline_event.v1'")
        return v


__all__ = ["Artifact", "Semver"]
