"""Turn the configured ``loggedTopics`` list into a capture policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Tuple

from sdk.config import WILDCARD
from sdk.events import RecordOptions


class FilterMode(str, Enum):
    ALLOW_LIST = "allow_list"
    EVERYTHING = "everything"


@dataclass(frozen=True)
class FilterPolicy:
    """Which topics a capture sink subscribes to.

    ``names`` keeps the configured order; order does not change what is
    captured but keeps logs and bag metadata reproducible.
    """

    mode: FilterMode
    names: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def everything(cls) -> "FilterPolicy":
        return cls(FilterMode.EVERYTHING)

    @classmethod
    def allow_list(cls, names: Sequence[str]) -> "FilterPolicy":
        return cls(FilterMode.ALLOW_LIST, tuple(names))

    @property
    def captures_everything(self) -> bool:
        return self.mode is FilterMode.EVERYTHING

    def matches(self, topic: str) -> bool:
        return self.captures_everything or topic in self.names

    def to_record_options(self) -> RecordOptions:
        if self.captures_everything:
            return RecordOptions(all_topics=True, topics=[])
        return RecordOptions(all_topics=False, topics=list(self.names))

    def describe(self) -> str:
        return "*" if self.captures_everything else " ".join(self.names)


def resolve(selectors: Sequence[str]) -> FilterPolicy:
    """Map a selector list to a policy.

    A leading ``"*"`` selects every topic and anything after it is ignored.
    Otherwise the list is an allow-list, taken verbatim.
    """

    if selectors and selectors[0] == WILDCARD:
        return FilterPolicy.everything()
    return FilterPolicy.allow_list(selectors)


__all__ = ["FilterMode", "FilterPolicy", "resolve"]
