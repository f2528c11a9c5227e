"""
Preset variation profiles for common exam settings.
"""

from pathlib import Path

from exam_analysis.variants.config import ExamVariationConfig, load_config

PRESETS_DIR = Path(__file__).parent / "presets"


def get_available_presets() -> list[str]:
    return sorted(x.stem for x in PRESETS_DIR.glob("*.yaml"))


def get_preset(name: str) -> ExamVariationConfig:
    """Get a preset configuration by name."""
    config_path = PRESETS_DIR / f"{name}.yaml"
    if not config_path.exists():
        available_presets = get_available_presets()
        raise ValueError(
            f"Unknown preset: {name}. Available presets: {available_presets}"
        )
    return load_config(config_path)
