"""
Build parameters — the named inputs of a Unity build step.

Two parameter sets exist, mirroring how a CI server hands them over:

    - ``RunnerParameters``: configured on the build step itself.
    - ``FeatureParameters``: configured once on the build configuration's
      Unity feature and shared by all of its Unity steps.

Both accept the snake_case field names and the camelCase keys a CI
server stores (``projectPath``, ``runEditorTests``, ...). Flags arrive as
strings from the server, so ``"true"``/``"false"``/``""`` are coerced.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

RUNNER_TYPE = "unity"
RUNNER_DISPLAY_NAME = "Unity"
UNITY_CONFIG_NAME = "unity.path."
UNITY_PATH_ENV = "UNITY_PATH"


def _param(name: str, camel: str) -> Any:
    return Field(default="", validation_alias=AliasChoices(name, camel))


def _flag(name: str, camel: str) -> Any:
    return Field(default=False, validation_alias=AliasChoices(name, camel))


def _coerce_flag(value: Any) -> Any:
    if value is None:
        return False
    # CI parameters arrive as strings; only "true" (any case) switches a flag on
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value


def _coerce_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(str(v) for v in value)
    return value


class RunnerParameters(BaseModel):
    """Parameters of a single Unity build step."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    unity_version: str = _param("unity_version", "unityVersion")
    project_path: str = _param("project_path", "projectPath")
    build_target: str = _param("build_target", "buildTarget")
    build_player: str = _param("build_player", "buildPlayer")
    build_player_path: str = _param("build_player_path", "buildPlayerPath")
    run_editor_tests: bool = _flag("run_editor_tests", "runEditorTests")
    no_graphics: bool = _flag("no_graphics", "noGraphics")
    execute_method: str = _param("execute_method", "executeMethod")
    arguments: str = _param("arguments", "arguments")
    test_platform: str = _param("test_platform", "testPlatform")
    test_categories: str = _param("test_categories", "testCategories")
    test_names: str = _param("test_names", "testNames")

    @field_validator("run_editor_tests", "no_graphics", mode="before")
    @classmethod
    def flags_from_strings(cls, value: Any) -> Any:
        return _coerce_flag(value)

    @field_validator(
        "unity_version", "project_path", "build_target", "build_player",
        "build_player_path", "execute_method", "arguments", "test_platform",
        "test_categories", "test_names",
        mode="before",
    )
    @classmethod
    def text_or_empty(cls, value: Any) -> Any:
        return _coerce_text(value)


class FeatureParameters(BaseModel):
    """Parameters of the build configuration's Unity feature."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    unity_version: str = _param("unity_version", "unityVersion")
    cache_server: str = _param("cache_server", "cacheServer")

    @field_validator("unity_version", "cache_server", mode="before")
    @classmethod
    def text_or_empty(cls, value: Any) -> Any:
        return _coerce_text(value)
