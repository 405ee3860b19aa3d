"""Mission kinds, default statuses and tag collections.

A tag's category names one of three missions. Only issue reports carry a
vote counter on their statuses and are eligible for archival.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Mission(StrEnum):
    """Mission a tag reports on."""

    FACILITY = "設施回報"
    ISSUE = "問題回報"
    ACTIVITY = "動態回報"

    @property
    def votable(self) -> bool:
        """Whether statuses of this mission carry an upvote counter."""
        return self in VOTABLE_MISSIONS

    @property
    def default_status(self) -> str:
        """Status name given to a new tag when the client sends none."""
        return DEFAULT_STATUS[self]


VOTABLE_MISSIONS = frozenset({Mission.ISSUE})

DEFAULT_STATUS: dict[Mission, str] = {
    Mission.FACILITY: "存在",
    Mission.ISSUE: "待處理",
    Mission.ACTIVITY: "人少",
}


# Description of the status appended when a tag's category is edited
CATEGORY_CHANGE_DESCRIPTION = "(修改回報內容)"


def initial_vote_count(mission: Mission) -> int | None:
    """Counter value of a freshly appended status: 0 if votable, else None."""
    return 0 if mission.votable else None


@dataclass(frozen=True, slots=True)
class TagCollection:
    """Descriptor of a tag collection sharing one implementation.

    Attributes:
        name: Stored in ``Tag.collection`` and used in URLs and events.
        title: Human readable label (OpenAPI tags).
        accepts_status_desc_name: Whether status creation accepts the
            ``statusDescName`` field of the research variant.
    """

    name: str
    title: str
    accepts_status_desc_name: bool = False


TAGS = TagCollection(name="tags", title="tags")
RESEARCH_TAGS = TagCollection(name="research", title="research tags", accepts_status_desc_name=True)

COLLECTIONS: dict[str, TagCollection] = {c.name: c for c in (TAGS, RESEARCH_TAGS)}
