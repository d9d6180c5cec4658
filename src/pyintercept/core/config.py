# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Configuration: layered key/value settings and typed property binding.

Values come from a nested mapping (usually loaded from ``pyintercept.yaml``
or ``pyintercept.toml``) and are addressed with dotted keys such as
``pyintercept.interception.validate-return-types``. An environment variable
overrides any key; string values may reference other keys or environment
variables with ``${...}`` placeholders.
"""

from __future__ import annotations

import dataclasses
import os
import re
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar, cast, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

T = TypeVar("T")

_PREFIX_ATTR = "__pyintercept_config_prefix__"
_ENV_PREFIX = "PYINTERCEPT_"
_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10
_TRUTHY = frozenset({"true", "1", "yes", "on"})


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Bind a dataclass or pydantic model to the config section at *prefix*.

    Usage::

        @config_properties(prefix="pyintercept.interception")
        @dataclass
        class InterceptionProperties:
            enabled: bool = True
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def env_key(key: str) -> str:
    """Environment variable that overrides *key*.

    ``pyintercept.interception.log-level`` -> ``PYINTERCEPT_INTERCEPTION_LOG_LEVEL``
    """
    name = key.removeprefix("pyintercept.")
    return _ENV_PREFIX + re.sub(r"[.\-]", "_", name).upper()


def _parse_scalar(raw: str, expected: Any) -> Any:
    if expected is bool:
        return raw.strip().lower() in _TRUTHY
    if expected is int:
        return int(raw)
    if expected is float:
        return float(raw)
    return raw


def _merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def _read(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as f:
            return tomllib.load(f)
    with path.open() as f:
        return yaml.safe_load(f) or {}


class Config:
    """Nested settings with dotted-key access.

    Lookup order for :meth:`get` (first hit wins):

    1. the ``PYINTERCEPT_*`` environment variable for the key
    2. the loaded data, where ``log-level`` and ``log_level`` are the same key
    3. the caller's default
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @classmethod
    def from_file(cls, path: str | Path, active_profiles: list[str] | None = None) -> Config:
        """Load *path* and merge ``<stem>-<profile><suffix>`` overlays on top.

        Profiles are applied in order, so later ones win. A missing base file
        gives an empty configuration; missing overlays are skipped.
        """
        path = Path(path)
        config = cls()
        if not path.is_file():
            return config

        data = _read(path)
        config._loaded_sources.append(str(path))
        for profile in active_profiles or []:
            overlay = path.with_name(f"{path.stem}-{profile}{path.suffix}")
            if overlay.is_file():
                data = _merge(data, _read(overlay))
                config._loaded_sources.append(f"{overlay} (profile: {profile})")
        config._data = data
        return config

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this configuration, base file first."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at dotted *key*, resolving ``${...}`` placeholders.

        Placeholders name an environment variable or another config key and
        may carry a fallback: ``${LOG_LEVEL:INFO}``.
        """
        override = os.environ.get(env_key(key))
        if override is not None:
            return override
        value = self._find(key)
        if value is None:
            return default
        if isinstance(value, str):
            return self._interpolate(value)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Return the mapping at *prefix* with dashes in its keys turned into underscores."""
        section = self._find(prefix)
        if not isinstance(section, dict):
            return {}
        return {str(k).replace("-", "_"): v for k, v in section.items()}

    def _find(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict):
                return None
            for spelling in (part, part.replace("-", "_"), part.replace("_", "-")):
                if spelling in node:
                    node = node[spelling]
                    break
            else:
                return None
        return node

    def _interpolate(self, value: str, depth: int = 0) -> str:
        if "${" not in value:
            return value
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(f"Max recursion depth exceeded resolving placeholders in '{value}'")
        return _PLACEHOLDER.sub(lambda m: self._resolve_reference(m.group(1), depth), value)

    def _resolve_reference(self, reference: str, depth: int) -> str:
        name, has_fallback, fallback = reference.partition(":")
        from_env = os.environ.get(name)
        if from_env is not None:
            return from_env
        found = self._find(name)
        if found is not None:
            return self._interpolate(str(found), depth + 1)
        if has_fallback:
            return fallback
        raise ValueError(f"Cannot resolve placeholder '${{{reference}}}': not found in environment or config")

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind(self, config_cls: type[T]) -> T:
        """Build an instance of a ``@config_properties`` dataclass or pydantic model.

        Environment overrides win over file values; fields left unset keep
        their declared defaults.

        Raises:
            ValueError: *config_cls* is not decorated, or a pydantic model
                rejects the values.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        if issubclass(config_cls, BaseModel):
            return cast(T, self._bind_model(config_cls, prefix))
        return self._bind_dataclass(config_cls, prefix)

    def _bind_model(self, model: type[BaseModel], prefix: str) -> BaseModel:
        values = self.get_section(prefix)
        for name in model.model_fields:
            override = os.environ.get(env_key(f"{prefix}.{name}"))
            if override is not None:
                values[name] = override
        try:
            return model.model_validate(values)
        except ValidationError as exc:
            raise ValueError(
                f"Configuration validation failed for '{model.__name__}' (prefix='{prefix}'):\n{exc}"
            ) from exc

    def _bind_dataclass(self, config_cls: type[T], prefix: str) -> T:
        section = self.get_section(prefix)
        hints = get_type_hints(config_cls)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            override = os.environ.get(env_key(f"{prefix}.{field.name}"))
            if override is not None:
                values[field.name] = _parse_scalar(override, hints.get(field.name))
            elif field.name in section:
                raw = section[field.name]
                values[field.name] = _parse_scalar(raw, hints.get(field.name)) if isinstance(raw, str) else raw
        return config_cls(**values)
