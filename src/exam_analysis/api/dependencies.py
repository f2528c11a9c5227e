from functools import lru_cache

import toml

from exam_analysis.api.config import ApiSettings
from exam_analysis.core.paths import get_project_root_dir


@lru_cache(maxsize=1)
def get_settings() -> ApiSettings:
    return ApiSettings()


@lru_cache(maxsize=1)
def get_version() -> str:
    root_dir = get_project_root_dir()
    with open(root_dir / "pyproject.toml") as f:
        data = toml.load(f)

    version = data.get("project", {}).get("version")
    if not version:
        raise ValueError("Version not found in pyproject.toml")

    assert isinstance(version, str)
    return version
