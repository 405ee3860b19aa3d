"""Tags feature: issue reports, status history, upvotes and archival."""

from __future__ import annotations

from .models import FixedTag, FixedTagSubLocation, SubLocationStatus, Tag, TagSetting, TagStatus, UpVote

__all__ = [
    "FixedTag",
    "FixedTagSubLocation",
    "SubLocationStatus",
    "Tag",
    "TagSetting",
    "TagStatus",
    "UpVote",
]
