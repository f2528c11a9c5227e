"""
Configuration for exam variant generation.

`ExamVariationConfig` is a plain dataclass so it can serve both as an
OmegaConf structured schema (YAML presets) and as the in-process config
passed to the generator.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path

from omegaconf import OmegaConf
from pydantic.alias_generators import to_snake

from exam_analysis.core.constants import DEFAULT_VARIATION_CAP
from exam_analysis.core.exceptions import InvalidInputError


@dataclass
class ExamVariationConfig:
    """Settings for one generation call.

    Attributes:
        randomize_question_order: Shuffle the question order per variant.
        randomize_option_order: Shuffle multiple-choice options.
        randomize_true_false_options: Shuffle the True/False pair.
        randomize_question_subset: Draw `question_count` questions per variant.
        question_count: Subset size, used only with subset randomization.
        seed: Base seed. Derived from the question content when empty.
        max_variations: Number of variants requested.
        enforce_max_variations: Produce exactly the requested number of
            variants (up to `variation_cap`) even if some are identical.
        variation_cap: Upper bound on variants and on the estimated number
            of distinct variations.
    """

    randomize_question_order: bool = True
    randomize_option_order: bool = True
    randomize_true_false_options: bool = False
    randomize_question_subset: bool = False
    question_count: int = 0
    seed: str = ""
    max_variations: int = 3
    enforce_max_variations: bool = False
    variation_cap: int = DEFAULT_VARIATION_CAP

    def __post_init__(self) -> None:
        if self.max_variations < 0:
            raise InvalidInputError(
                f"maxVariations must be >= 0, got {self.max_variations}"
            )
        if self.question_count < 0:
            raise InvalidInputError(
                f"questionCount must be >= 0, got {self.question_count}"
            )
        if self.variation_cap < 1:
            raise InvalidInputError(
                f"variationCap must be >= 1, got {self.variation_cap}"
            )

    @property
    def uses_subset(self) -> bool:
        return self.randomize_question_subset and self.question_count > 0

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, object] | None = None
    ) -> "ExamVariationConfig":
        """Build a config from camelCase or snake_case keys.

        Unknown keys are ignored and missing keys take their defaults.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, object] = {}
        for key, value in (values or {}).items():
            name = to_snake(key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)  # type: ignore[arg-type]


def load_config(yaml_path: Path | None = None) -> ExamVariationConfig:
    """Load and validate a variation config from YAML.

    Args:
        yaml_path: Path to YAML config file. Defaults are used when None.

    Returns:
        Validated ExamVariationConfig

    Raises:
        FileNotFoundError: If yaml_path doesn't exist
    """
    schema = OmegaConf.structured(ExamVariationConfig)

    if yaml_path is not None:
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        user_config = OmegaConf.load(yaml_path)
        config = OmegaConf.merge(schema, user_config)
    else:
        config = schema

    result = OmegaConf.to_object(config)
    assert isinstance(result, ExamVariationConfig)

    return result
