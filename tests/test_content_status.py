# =============================================================================
# tests/test_content_status.py - Derived Content Status Tests
# =============================================================================

import pytest

from lib.content_status import (
    DerivedStatus,
    can_schedule_content,
    determine_content_status,
    get_status_actions,
    matches_status_filter,
)


def asset(**fields):
    base = {"approved": False, "asset_status": None, "asset_scheduled_at": None}
    base.update(fields)
    return base


class TestDetermineContentStatus:

    def test_transcription_running_is_processing(self):
        content = {"status": "processing", "content_generation_status": None}
        assert determine_content_status(content, []) is DerivedStatus.PROCESSING

    def test_generation_running_is_processing(self):
        content = {"status": "completed", "content_generation_status": "generating"}
        assert determine_content_status(content, [asset()]) is DerivedStatus.PROCESSING

    def test_processing_wins_over_sent_assets(self):
        content = {"status": "processing"}
        assets = [asset(asset_status="Sent")]
        assert determine_content_status(content, assets) is DerivedStatus.PROCESSING

    def test_generation_failed(self):
        content = {"status": "completed", "content_generation_status": "failed"}
        assert determine_content_status(content, [asset()]) is DerivedStatus.FAILED

    def test_completed_without_assets_is_failed(self):
        content = {"status": "completed", "content_generation_status": "completed"}
        assert determine_content_status(content, []) is DerivedStatus.FAILED

    def test_all_sent_is_completed(self):
        content = {"status": "completed"}
        assets = [asset(asset_status="Sent"), asset(asset_status="Sent")]
        assert determine_content_status(content, assets) is DerivedStatus.COMPLETED

    def test_some_sent_is_partially_published(self):
        content = {"status": "completed"}
        assets = [asset(asset_status="Sent"), asset(asset_scheduled_at="2024-06-01T09:00:00Z")]
        assert determine_content_status(content, assets) is DerivedStatus.PARTIALLY_PUBLISHED

    def test_scheduled_none_sent(self):
        content = {"status": "completed"}
        assets = [asset(asset_scheduled_at="2024-06-01T09:00:00Z"), asset()]
        assert determine_content_status(content, assets) is DerivedStatus.SCHEDULED

    def test_otherwise_draft(self):
        content = {"status": "completed"}
        assert determine_content_status(content, [asset()]) is DerivedStatus.DRAFT

    def test_creating_without_assets_is_draft(self):
        content = {"status": "creating", "content_generation_status": "pending"}
        assert determine_content_status(content, []) is DerivedStatus.DRAFT


class TestStatusHelpers:

    def test_labels(self):
        assert DerivedStatus.PARTIALLY_PUBLISHED.label == "Partially Published"
        assert DerivedStatus.DRAFT.label == "Draft"

    def test_enum_values_are_wire_strings(self):
        assert DerivedStatus("partially-published") is DerivedStatus.PARTIALLY_PUBLISHED

    @pytest.mark.parametrize("assets,expected", [
        ([], False),
        ([{"approved": True}, {"approved": False}], False),
        ([{"approved": True}, {"approved": None}], False),
        ([{"approved": True}, {"approved": True}], True),
    ])
    def test_can_schedule_content(self, assets, expected):
        assert can_schedule_content(assets) is expected

    def test_draft_filter_includes_failed(self):
        assert matches_status_filter(DerivedStatus.FAILED, DerivedStatus.DRAFT)
        assert matches_status_filter(DerivedStatus.DRAFT, DerivedStatus.DRAFT)
        assert not matches_status_filter(DerivedStatus.SCHEDULED, DerivedStatus.DRAFT)

    def test_other_filters_are_exact(self):
        assert not matches_status_filter(DerivedStatus.FAILED, DerivedStatus.COMPLETED)
        assert matches_status_filter(DerivedStatus.COMPLETED, DerivedStatus.COMPLETED)

    def test_processing_allows_nothing(self):
        actions = get_status_actions(DerivedStatus.PROCESSING)
        assert not any(actions.model_dump().values())

    def test_failed_can_retry_and_delete(self):
        actions = get_status_actions(DerivedStatus.FAILED)
        assert actions.can_retry and actions.show_retry and actions.can_delete
        assert not actions.can_edit

    def test_only_drafts_can_schedule(self):
        schedulable = [s for s in DerivedStatus if get_status_actions(s).can_schedule]
        assert schedulable == [DerivedStatus.DRAFT]

    def test_completed_is_read_only(self):
        actions = get_status_actions(DerivedStatus.COMPLETED)
        assert actions.can_navigate
        assert not (actions.can_edit or actions.can_delete or actions.can_retry)
