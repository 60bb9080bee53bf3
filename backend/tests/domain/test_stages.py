"""Tests for pipeline stage tables and category attribution."""
import pytest

from studio.domain.stages import (
    NON_TERMINAL_STAGES,
    PIPELINE_ORDER,
    STAGE_CONFIG,
    STAGE_DISPLAY_NAMES,
    PipelineStage,
    TaskCategory,
    get_next_stage,
    get_stage_display_name,
    parse_stage,
    stage_for_category,
)

pytestmark = pytest.mark.unit


class TestPipelineOrder:
    """Pipeline order and stage configuration."""

    def test_order(self):
        """Stages run consultation -> complete."""
        assert [s.value for s in PIPELINE_ORDER] == [
            "consultation",
            "vision_board",
            "ordering",
            "installation",
            "styling",
            "complete",
        ]

    def test_non_terminal_stages_exclude_complete(self):
        assert PipelineStage.COMPLETE not in NON_TERMINAL_STAGES
        assert len(NON_TERMINAL_STAGES) == 5

    def test_bands_are_contiguous(self):
        """Each stage's band starts where the previous one ends."""
        expected_base = 0
        for stage in NON_TERMINAL_STAGES:
            config = STAGE_CONFIG[stage]
            assert config.base_progress == expected_base
            expected_base += config.stage_weight
        assert expected_base == 100

    def test_complete_band(self):
        config = STAGE_CONFIG[PipelineStage.COMPLETE]
        assert config.base_progress == 100
        assert config.stage_weight == 0

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            STAGE_CONFIG[PipelineStage.COMPLETE] = None  # type: ignore[index]


class TestStageForCategory:
    """Category -> stage attribution."""

    @pytest.mark.parametrize(
        "category,stage",
        [
            ("consultation", PipelineStage.CONSULTATION),
            ("design", PipelineStage.VISION_BOARD),
            ("ordering", PipelineStage.ORDERING),
            ("installation", PipelineStage.INSTALLATION),
            ("communication", PipelineStage.STYLING),
            ("administrative", PipelineStage.CONSULTATION),
        ],
    )
    def test_known_categories(self, category, stage):
        assert stage_for_category(category) == stage

    def test_enum_members(self):
        assert stage_for_category(TaskCategory.DESIGN) == PipelineStage.VISION_BOARD

    def test_unknown_category_defaults_to_consultation(self):
        assert stage_for_category("site_visit") == PipelineStage.CONSULTATION

    def test_missing_category_defaults_to_consultation(self):
        assert stage_for_category(None) == PipelineStage.CONSULTATION
        assert stage_for_category(42) == PipelineStage.CONSULTATION

    def test_no_category_maps_to_complete(self):
        assert all(stage_for_category(c) != PipelineStage.COMPLETE for c in TaskCategory)


class TestParseStage:
    def test_valid_values(self):
        assert parse_stage("styling") == PipelineStage.STYLING
        assert parse_stage(PipelineStage.ORDERING) is PipelineStage.ORDERING

    def test_invalid_values(self):
        assert parse_stage("Styling") is None
        assert parse_stage("") is None
        assert parse_stage(None) is None
        assert parse_stage(3) is None


class TestDisplayNames:
    def test_every_stage_has_a_name(self):
        assert set(STAGE_DISPLAY_NAMES) == set(PipelineStage)

    def test_names(self):
        assert get_stage_display_name("consultation") == "Initial Consultation"
        assert get_stage_display_name(PipelineStage.ORDERING) == "Ordering & Procurement"
        assert get_stage_display_name("complete") == "Project Complete"

    def test_unknown_stage(self):
        assert get_stage_display_name("paused") == "Unknown Stage"
        assert get_stage_display_name(None) == "Unknown Stage"


class TestGetNextStage:
    def test_walks_the_pipeline(self):
        stage = PipelineStage.CONSULTATION
        visited = [stage]
        while (stage := get_next_stage(stage)) is not None:
            visited.append(stage)
        assert visited == list(PIPELINE_ORDER)

    def test_complete_has_no_next_stage(self):
        assert get_next_stage("complete") is None

    def test_unknown_stage_has_no_next_stage(self):
        assert get_next_stage("paused") is None

    def test_accepts_raw_strings(self):
        assert get_next_stage("installation") == PipelineStage.STYLING
