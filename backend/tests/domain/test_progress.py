"""Tests for deterministic project progress computation."""
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from studio.domain.progress import (
    ProgressResult,
    calculate_project_progress,
    evaluate_project_progress,
    get_all_stage_progress,
    get_progress_breakdown,
    round_half_up,
)
from studio.domain.stages import NON_TERMINAL_STAGES, PipelineStage, TaskCategory, TaskStatus

pytestmark = pytest.mark.unit


def task(category, status="pending"):
    return {"category": category, "status": status}


class TestCalculateProjectProgress:
    """Overall percentage from stage band + current-stage task ratio."""

    def test_new_project_with_no_tasks_is_zero(self):
        """Consultation with no tasks yields 0."""
        assert calculate_project_progress("consultation", []) == 0

    def test_half_complete_design_tasks_in_vision_board(self):
        """2 design tasks, 1 completed: 20 + 0.5 * 20 = 30."""
        tasks = [task("design", "completed"), task("design", "pending")]
        assert calculate_project_progress("vision_board", tasks) == 30

    def test_all_installation_tasks_complete(self):
        """1 of 1 installation tasks completed: 60 + 20 = 80."""
        tasks = [task("installation", "completed")]
        assert calculate_project_progress("installation", tasks) == 80

    def test_complete_ignores_tasks(self):
        """A complete project is 100 whatever its tasks say."""
        assert calculate_project_progress("complete", [task("design", "pending")]) == 100

    def test_styling_only_counts_communication_tasks(self):
        """The ordering task is excluded from the styling ratio entirely."""
        tasks = [task("communication", "completed"), task("ordering", "completed")]
        assert calculate_project_progress("styling", tasks) == 100

    def test_stage_without_attributed_tasks_sits_at_base(self):
        """Ordering with no ordering tasks is exactly its base of 40."""
        tasks = [task("design", "completed"), task("installation", "completed")]
        assert calculate_project_progress("ordering", tasks) == 40

    def test_in_progress_tasks_do_not_count_as_completed(self):
        tasks = [task("ordering", "in_progress"), task("ordering", "completed")]
        assert calculate_project_progress("ordering", tasks) == 50

    @pytest.mark.parametrize(
        "stage,base",
        [
            ("consultation", 0),
            ("vision_board", 20),
            ("ordering", 40),
            ("installation", 60),
            ("styling", 80),
        ],
    )
    def test_stage_bands(self, stage, base):
        """Each stage maps a ratio r to round(base + 20r)."""
        category = {
            "consultation": "consultation",
            "vision_board": "design",
            "ordering": "ordering",
            "installation": "installation",
            "styling": "communication",
        }[stage]
        none_done = [task(category), task(category), task(category), task(category)]
        quarter_done = [task(category, "completed")] + none_done[1:]
        all_done = [task(category, "completed") for _ in range(4)]

        assert calculate_project_progress(stage, none_done) == base
        assert calculate_project_progress(stage, quarter_done) == base + 5
        assert calculate_project_progress(stage, all_done) == base + 20

    def test_administrative_tasks_count_towards_consultation(self):
        """Administrative tasks feed consultation regardless of the project's stage."""
        tasks = [task("administrative", "completed"), task("consultation", "pending")]
        assert calculate_project_progress("consultation", tasks) == 10
        # Same tasks contribute nothing once the project is in ordering
        assert calculate_project_progress("ordering", tasks) == 40

    def test_unknown_category_defaults_to_consultation(self):
        tasks = [task("site_visit", "completed")]
        assert calculate_project_progress("consultation", tasks) == 20
        assert calculate_project_progress("vision_board", tasks) == 20

    def test_half_values_round_up(self):
        """1 of 8 tasks: 0 + 2.5 rounds up to 3, not to even."""
        tasks = [task("consultation", "completed")] + [task("consultation") for _ in range(7)]
        assert calculate_project_progress("consultation", tasks) == 3

    def test_thirds_round_to_nearest(self):
        """20 + 20/3 = 26.67 -> 27 and 20 + 40/3 = 33.33 -> 33."""
        one_of_three = [task("design", "completed"), task("design"), task("design")]
        two_of_three = [task("design", "completed"), task("design", "completed"), task("design")]
        assert calculate_project_progress("vision_board", one_of_three) == 27
        assert calculate_project_progress("vision_board", two_of_three) == 33

    def test_accepts_enum_members_and_objects(self):
        """Stage and task fields may be enums; tasks may be attribute objects."""
        tasks = [
            SimpleNamespace(category=TaskCategory.DESIGN, status=TaskStatus.COMPLETED),
            SimpleNamespace(category=TaskCategory.DESIGN, status=TaskStatus.PENDING),
        ]
        assert calculate_project_progress(PipelineStage.VISION_BOARD, tasks) == 30

    def test_accepts_generators(self):
        tasks = (task("ordering", "completed") for _ in range(2))
        assert calculate_project_progress("ordering", tasks) == 60

    def test_unknown_stage_returns_zero_and_warns(self):
        """An unrecognized stage never raises; it logs a warning and yields 0."""
        with patch("studio.domain.progress.logger") as mock_logger:
            assert calculate_project_progress("demolition", [task("design", "completed")]) == 0
        mock_logger.warning.assert_called_once_with("unknown_project_stage", stage="demolition")

    def test_known_stage_does_not_warn(self):
        with patch("studio.domain.progress.logger") as mock_logger:
            calculate_project_progress("styling", [])
        mock_logger.warning.assert_not_called()

    def test_deterministic(self):
        tasks = [task("design", "completed"), task("design")]
        assert calculate_project_progress("vision_board", tasks) == calculate_project_progress("vision_board", tasks)


class TestEvaluateProjectProgress:
    """Result-type variant used when the caller wants to decide about logging."""

    def test_known_stage_result(self):
        result = evaluate_project_progress("installation", [task("installation", "completed")])
        assert result == ProgressResult(percentage=80, unknown_stage=False)

    def test_unknown_stage_result(self):
        result = evaluate_project_progress(None, [])
        assert result.percentage == 0
        assert result.unknown_stage is True

    def test_does_not_log(self):
        with patch("studio.domain.progress.logger") as mock_logger:
            evaluate_project_progress("bogus", [])
        mock_logger.warning.assert_not_called()

    @pytest.mark.parametrize("stage", [s.value for s in PipelineStage])
    def test_always_within_bounds(self, stage):
        mixes = [
            [],
            [task(c.value, "completed") for c in TaskCategory],
            [task(c.value) for c in TaskCategory],
            [task("design", "completed"), task("mystery", "completed"), task("ordering")],
        ]
        for tasks in mixes:
            assert 0 <= evaluate_project_progress(stage, tasks).percentage <= 100


class TestRoundHalfUp:
    def test_rounding(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(99.5) == 100
        assert round_half_up(40) == 40


class TestGetAllStageProgress:
    """Five-row timeline for the stepper view."""

    def test_always_five_rows_in_pipeline_order(self):
        rows = get_all_stage_progress("ordering", [])
        assert [r.stage for r in rows] == list(NON_TERMINAL_STAGES)
        assert [r.display_name for r in rows] == [
            "Initial Consultation",
            "Vision Board Creation",
            "Ordering & Procurement",
            "Installation Phase",
            "Final Styling",
        ]

    def test_past_current_and_future_stages(self):
        tasks = [task("ordering", "completed"), task("ordering"), task("ordering"), task("ordering")]
        rows = get_all_stage_progress("ordering", tasks)

        assert [r.is_completed for r in rows] == [True, True, False, False, False]
        assert [r.is_current for r in rows] == [False, False, True, False, False]
        assert [r.progress for r in rows] == [100, 100, 25, 0, 0]

    def test_exactly_one_current_stage(self):
        for stage in NON_TERMINAL_STAGES:
            rows = get_all_stage_progress(stage, [])
            assert sum(1 for r in rows if r.is_current) == 1

    def test_current_stage_without_tasks_shows_fifty(self):
        """Display default of 50, unlike the numeric engine which adds 0."""
        rows = get_all_stage_progress("installation", [task("design", "completed")])
        current = next(r for r in rows if r.is_current)
        assert current.stage == PipelineStage.INSTALLATION
        assert current.progress == 50
        assert calculate_project_progress("installation", [task("design", "completed")]) == 60

    def test_complete_project_marks_all_completed(self):
        rows = get_all_stage_progress("complete", [task("design")])
        assert all(r.is_completed for r in rows)
        assert not any(r.is_current for r in rows)
        assert all(r.progress == 100 for r in rows)

    def test_current_stage_percentage_rounds_half_up(self):
        """1 of 8 tasks in the current stage: 12.5 -> 13."""
        tasks = [task("design", "completed")] + [task("design") for _ in range(7)]
        current = next(r for r in get_all_stage_progress("vision_board", tasks) if r.is_current)
        assert current.progress == 13

    def test_task_counts_ignore_completion(self):
        tasks = [
            task("consultation", "completed"),
            task("administrative"),
            task("design"),
            task("communication", "completed"),
            task("unmapped"),
        ]
        rows = get_all_stage_progress("consultation", tasks)
        assert [r.task_count for r in rows] == [3, 1, 0, 0, 1]

    def test_unknown_stage_has_no_current_or_completed(self):
        rows = get_all_stage_progress("archived", [task("design")])
        assert len(rows) == 5
        assert not any(r.is_current or r.is_completed for r in rows)
        assert all(r.progress == 0 for r in rows)


class TestGetProgressBreakdown:
    def test_breakdown_for_partial_stage(self):
        tasks = [task("design", "completed"), task("design"), task("ordering", "completed")]
        breakdown = get_progress_breakdown("vision_board", tasks)

        assert breakdown.total_progress == 30
        assert breakdown.base_progress == 20
        assert breakdown.current_stage == "vision_board"
        assert breakdown.current_stage_progress == 10
        assert breakdown.current_stage_tasks == 2
        assert breakdown.completed_current_stage_tasks == 1
        assert breakdown.task_completion_ratio == 0.5

    def test_empty_stage_reports_half_ratio(self):
        breakdown = get_progress_breakdown("styling", [])
        assert breakdown.total_progress == 80
        assert breakdown.current_stage_progress == 0
        assert breakdown.current_stage_tasks == 0
        assert breakdown.task_completion_ratio == 0.5

    def test_complete_project(self):
        breakdown = get_progress_breakdown("complete", [task("design", "completed")])
        assert breakdown.total_progress == 100
        assert breakdown.base_progress == 100
        assert breakdown.current_stage_progress == 0

    def test_unknown_stage(self):
        with patch("studio.domain.progress.logger"):
            breakdown = get_progress_breakdown("on_hold", [task("design", "completed")])
        assert breakdown.total_progress == 0
        assert breakdown.base_progress == 0
        assert breakdown.current_stage == "on_hold"
