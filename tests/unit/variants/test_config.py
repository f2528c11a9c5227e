from pathlib import Path

import pytest

from exam_analysis.core.exceptions import InvalidInputError
from exam_analysis.variants.config import ExamVariationConfig, load_config
from exam_analysis.variants.presets import (
    PRESETS_DIR,
    get_available_presets,
    get_preset,
)


class TestExamVariationConfig:
    def test_defaults(self) -> None:
        config = ExamVariationConfig()
        assert config.randomize_question_order
        assert config.randomize_option_order
        assert not config.randomize_true_false_options
        assert not config.randomize_question_subset
        assert config.max_variations == 3
        assert not config.enforce_max_variations
        assert config.variation_cap == 100

    def test_negative_max_variations(self) -> None:
        with pytest.raises(InvalidInputError):
            ExamVariationConfig(max_variations=-1)

    def test_cap_below_one(self) -> None:
        with pytest.raises(InvalidInputError):
            ExamVariationConfig(variation_cap=0)

    def test_uses_subset(self) -> None:
        assert not ExamVariationConfig(randomize_question_subset=True).uses_subset
        assert ExamVariationConfig(
            randomize_question_subset=True, question_count=2
        ).uses_subset

    def test_from_mapping_camel_case(self) -> None:
        config = ExamVariationConfig.from_mapping(
            {"randomizeQuestionOrder": False, "maxVariations": 7, "seed": "abc"}
        )
        assert not config.randomize_question_order
        assert config.max_variations == 7
        assert config.seed == "abc"

    def test_from_mapping_ignores_unknown_and_none(self) -> None:
        config = ExamVariationConfig.from_mapping(
            {"somethingElse": 1, "maxVariations": None}
        )
        assert config == ExamVariationConfig()


class TestLoadConfig:
    def test_defaults_without_path(self) -> None:
        assert load_config() == ExamVariationConfig()

    def test_yaml_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("max_variations: 12\nseed: midterm\n")
        config = load_config(path)
        assert config.max_variations == 12
        assert config.seed == "midterm"
        assert config.randomize_question_order

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")


class TestPresets:
    def test_all_presets_load(self) -> None:
        for config_path in PRESETS_DIR.glob("*.yaml"):
            assert load_config(config_path) is not None

    def test_available_presets(self) -> None:
        assert "default" in get_available_presets()

    def test_high_security_enforces_count(self) -> None:
        preset = get_preset("high_security")
        assert preset.enforce_max_variations
        assert preset.randomize_true_false_options

    def test_unknown_preset(self) -> None:
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset("nonexistent_preset")
