import logging
from types import SimpleNamespace

from rotector.group_fetcher import GroupFetcher, GroupLockedError


class FakeGroupsAPI:
    def __init__(self, groups, failing=()):
        self.groups = groups
        self.failing = set(failing)
        self.calls = []

    def get_group_info(self, group_id):
        self.calls.append(group_id)
        if group_id in self.failing:
            raise RuntimeError("boom")
        return self.groups[group_id]


def _group(group_id, locked=None):
    return SimpleNamespace(id=group_id, name=f"group-{group_id}", is_locked=locked)


def test_returns_unlocked_groups_in_request_order():
    api = FakeGroupsAPI({1: _group(1), 2: _group(2, locked=False), 3: _group(3)})
    result = GroupFetcher(api, logging.getLogger("gf")).fetch_group_infos([3, 1, 2])
    assert [group.id for group in result] == [3, 1, 2]


def test_locked_groups_are_skipped_without_warning(caplog):
    api = FakeGroupsAPI({1: _group(1, locked=True), 2: _group(2)})
    with caplog.at_level(logging.WARNING, logger="gf"):
        result = GroupFetcher(api, logging.getLogger("gf")).fetch_group_infos([1, 2])
    assert [group.id for group in result] == [2]
    assert not [r for r in caplog.records if r.levelno == logging.WARNING]


def test_failed_groups_are_skipped_with_warning(caplog):
    api = FakeGroupsAPI({2: _group(2)}, failing={1})
    with caplog.at_level(logging.WARNING, logger="gf"):
        result = GroupFetcher(api, logging.getLogger("gf")).fetch_group_infos([1, 2])
    assert [group.id for group in result] == [2]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "groupID=1" in warnings[0].getMessage()


def test_duplicate_ids_fetched_once():
    api = FakeGroupsAPI({5: _group(5)})
    result = GroupFetcher(api, logging.getLogger("gf")).fetch_group_infos([5, 5, 5])
    assert len(result) == 1
    assert api.calls == [5]


def test_empty_input_returns_empty_list():
    api = FakeGroupsAPI({})
    assert GroupFetcher(api, logging.getLogger("gf")).fetch_group_infos([]) == []
    assert api.calls == []


def test_group_locked_error_carries_id():
    error = GroupLockedError(42)
    assert error.group_id == 42
    assert "locked" in str(error)