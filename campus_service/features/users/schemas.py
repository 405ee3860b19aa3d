"""Pydantic schemas for the users feature."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from campus_service.features.users.models import UserProfile


class ActivityAction(StrEnum):
    """Actions written to the activity log."""

    ADD_TAG = "addTag"
    UPDATE_TAG = "updateTag"
    UPDATE_STATUS = "updateStatus"
    DELETE_TAG = "deleteTag"
    VIEW_TAG = "viewTag"
    UPVOTE = "upVote"
    CANCEL_UPVOTE = "cancelUpVote"
    UPDATE_FIXED_TAG_STATUS = "updateFixedTagStatus"


class UserProfileRead(BaseModel):
    """``{userId, hasReadGuide, addTagCount}``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    has_read_guide: bool
    add_tag_count: int

    @classmethod
    def from_model(cls, profile: UserProfile) -> UserProfileRead:
        return cls(
            user_id=profile.user_id,
            has_read_guide=profile.has_read_guide,
            add_tag_count=profile.add_tag_count,
        )
