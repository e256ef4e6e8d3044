"""Tests for project progress and the active-project predicate."""

import random

import pytest
from paravault.vault.models import Project, ProjectItem
from paravault.vault.progress import (
    active_projects,
    completion_counts,
    is_active,
    is_complete,
    progress,
)


def _project(*done: bool, title: str = "Project") -> Project:
    return Project(
        title=title,
        slug=title.lower(),
        items=[ProjectItem(title=f"task {i}", completed=d) for i, d in enumerate(done)],
    )


class TestProgress:
    def test_empty_project_is_zero(self):
        assert progress(_project()) == 0

    def test_one_of_three(self):
        assert progress(_project(True, False, False)) == 33

    def test_two_of_three(self):
        assert progress(_project(True, True, False)) == 67

    def test_all_done(self):
        assert progress(_project(True, True)) == 100

    def test_none_done(self):
        assert progress(_project(False, False)) == 0

    def test_half_rounds_up(self):
        # 1/8 = 12.5%
        assert progress(_project(True, *[False] * 7)) == 13

    @pytest.mark.parametrize("total", range(1, 13))
    def test_bounds_and_full_completion(self, total: int):
        for completed in range(total + 1):
            project = _project(*([True] * completed + [False] * (total - completed)))
            value = progress(project)
            assert 0 <= value <= 100
            assert (value == 100) == (completed == total)

    def test_order_independent(self):
        flags = [True, False, True, True, False]
        shuffled = flags[:]
        random.Random(7).shuffle(shuffled)
        assert progress(_project(*flags)) == progress(_project(*shuffled))

    def test_counts(self):
        assert completion_counts(_project(True, False, True)) == (2, 3)


class TestActive:
    def test_empty_project_is_active(self):
        assert is_active(_project()) is True
        assert is_complete(_project()) is False

    def test_all_done_is_inactive(self):
        assert is_active(_project(True, True)) is False
        assert is_complete(_project(True, True)) is True

    def test_partially_done_is_active(self):
        assert is_active(_project(True, False)) is True

    def test_active_projects_filters(self):
        done = _project(True, True, title="Done")
        open_ = _project(True, False, title="Open")
        empty = _project(title="Empty")
        assert [p.title for p in active_projects([done, open_, empty])] == ["Open", "Empty"]
