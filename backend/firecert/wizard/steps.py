"""Wizard steps and the context their validators see.

A Step pairs a validator with the fields it owns.  Validators are plain
functions of a StepContext and return {field_or_slug: message}; an empty
dict means the step is complete.  A step may also carry an async remote
check (e.g. a duplicate lookup), run only when the local rules pass.

categories=None means the step appears for every category; otherwise
the step only exists in the flows for the listed categories.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from firecert.wizard.requirements import DocumentRequirement
from firecert.wizard.slots import DocumentSlotStore


@dataclass(frozen=True)
class StepContext:
    fields: Mapping[str, Any]
    slots: DocumentSlotStore
    requirements: tuple[DocumentRequirement, ...] = ()
    record_id: str | None = None
    gateway: Any = None


Validator = Callable[[StepContext], dict[str, str]]
RemoteCheck = Callable[[StepContext], Awaitable[dict[str, str]]]


@dataclass(frozen=True)
class Step:
    key: str
    title: str
    validator: Validator
    fields: tuple[str, ...] = ()
    documents: bool = False
    categories: frozenset[str] | None = None
    remote_check: RemoteCheck | None = None

    def applies_to(self, category: str | None) -> bool:
        if self.categories is None:
            return True
        return category in self.categories
