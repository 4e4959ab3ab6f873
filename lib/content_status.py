# =============================================================================
# lib/content_status.py - Derived Content Status
# =============================================================================
# A content item's user-facing status is not stored; it is derived from the
# content row and its generated assets:
#
#   processing          transcription running or generation in progress
#   failed              generation failed, or completed with no assets
#   completed           every asset sent
#   partially-published some (not all) assets sent
#   scheduled           assets scheduled, none sent yet
#   draft               anything else
#
# Each status also maps to the set of actions the UI may offer.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

Row = Mapping[str, Any]


class DerivedStatus(str, Enum):
    """User-facing lifecycle of a content item."""
    PROCESSING = "processing"
    FAILED = "failed"
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PARTIALLY_PUBLISHED = "partially-published"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS: dict[DerivedStatus, str] = {
    DerivedStatus.PROCESSING: "Processing",
    DerivedStatus.FAILED: "Failed",
    DerivedStatus.DRAFT: "Draft",
    DerivedStatus.SCHEDULED: "Scheduled",
    DerivedStatus.PARTIALLY_PUBLISHED: "Partially Published",
    DerivedStatus.COMPLETED: "Completed",
}

ASSET_STATUS_SENT = "Sent"


class StatusActions(BaseModel):
    """Actions available for content in a given status."""
    can_edit: bool = False
    can_delete: bool = False
    can_navigate: bool = False
    can_schedule: bool = False
    can_retry: bool = False
    show_retry: bool = False

    model_config = {"frozen": True}


_ACTIONS: dict[DerivedStatus, StatusActions] = {
    DerivedStatus.PROCESSING: StatusActions(),
    DerivedStatus.FAILED: StatusActions(
        can_delete=True, can_retry=True, show_retry=True,
    ),
    # can_schedule still depends on every asset being approved
    DerivedStatus.DRAFT: StatusActions(
        can_edit=True, can_delete=True, can_navigate=True, can_schedule=True,
    ),
    DerivedStatus.SCHEDULED: StatusActions(
        can_edit=True, can_delete=True, can_navigate=True,
    ),
    DerivedStatus.PARTIALLY_PUBLISHED: StatusActions(
        can_edit=True, can_delete=True, can_navigate=True, can_retry=True, show_retry=True,
    ),
    DerivedStatus.COMPLETED: StatusActions(can_navigate=True),
}


def determine_content_status(content: Row, assets: Iterable[Row]) -> DerivedStatus:
    """
    Derive the user-facing status of a content item.

    Args:
        content: The content row
        assets: Its content_assets rows

    Returns:
        DerivedStatus
    """
    assets = list(assets)

    if (
        content.get("status") == "processing"
        or content.get("content_generation_status") == "generating"
    ):
        return DerivedStatus.PROCESSING

    if content.get("content_generation_status") == "failed" or (
        content.get("status") == "completed" and not assets
    ):
        return DerivedStatus.FAILED

    sent = sum(1 for a in assets if a.get("asset_status") == ASSET_STATUS_SENT)
    scheduled = sum(1 for a in assets if a.get("asset_scheduled_at"))

    if assets and sent == len(assets):
        return DerivedStatus.COMPLETED

    if 0 < sent < len(assets):
        return DerivedStatus.PARTIALLY_PUBLISHED

    if scheduled and not sent:
        return DerivedStatus.SCHEDULED

    return DerivedStatus.DRAFT


def can_schedule_content(assets: Iterable[Row]) -> bool:
    """Content can be scheduled only when it has assets and all are approved."""
    assets = list(assets)
    return bool(assets) and all(a.get("approved") is True for a in assets)


def matches_status_filter(status: DerivedStatus, target: DerivedStatus) -> bool:
    """Failed content is listed together with drafts."""
    if target is DerivedStatus.DRAFT:
        return status in (DerivedStatus.DRAFT, DerivedStatus.FAILED)
    return status is target


def get_status_actions(status: DerivedStatus) -> StatusActions:
    return _ACTIONS.get(status, StatusActions())
