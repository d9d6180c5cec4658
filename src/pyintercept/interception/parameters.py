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
"""Argument collection — the call's actual values paired with formal parameters."""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping
from typing import Any, overload

from pyintercept.kernel.exceptions import InvalidArgumentException

ParameterKind = inspect._ParameterKind

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class Parameter:
    """One argument of a call at runtime.

    Attributes:
        position: Index of the parameter in the member signature.
        name: Parameter name as declared on the interface.
        value: Current value; may be rewritten before the real call runs.
        annotation: Declared type, or ``Any`` when unannotated.
        kind: How the parameter is passed (positional, keyword, ``*args``, ``**kwargs``).
    """

    __slots__ = ("position", "name", "value", "annotation", "kind")

    def __init__(
        self,
        position: int,
        name: str,
        value: Any,
        annotation: Any = Any,
        kind: ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ) -> None:
        if position < 0:
            raise InvalidArgumentException("position", f"{position} must be greater or equal to zero")
        self.position = position
        self.name = name
        self.value = value
        self.annotation = annotation
        self.kind = kind

    def change_value_to(self, new_value: Any) -> Parameter:
        """Replace the value and return self for chaining."""
        self.value = new_value
        return self

    def __repr__(self) -> str:
        return f"Parameter(position={self.position}, name={self.name!r}, value={self.value!r})"


class ParameterCollection:
    """Fixed-size, ordered view over a call's arguments.

    Parameters are addressed by position or by name. Values can be replaced;
    parameters can be neither added nor removed::

        invocation.arguments["name"] = "Grace"
        invocation.arguments[0].change_value_to("Grace")
    """

    def __init__(self, parameters: list[Parameter]) -> None:
        self._parameters = parameters

    @classmethod
    def bind(
        cls,
        signature: inspect.Signature,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
        type_hints: Mapping[str, Any] | None = None,
    ) -> ParameterCollection:
        """Bind actual arguments to *signature*, applying declared defaults.

        Raises the same ``TypeError`` a direct call would when the
        arguments do not fit the signature.
        """
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()
        hints = type_hints or {}
        parameters = [
            Parameter(
                position=index,
                name=name,
                value=bound.arguments[name],
                annotation=hints.get(name, Any if formal.annotation is inspect.Parameter.empty else formal.annotation),
                kind=formal.kind,
            )
            for index, (name, formal) in enumerate(signature.parameters.items())
        ]
        return cls(parameters)

    def _index_of(self, name: str) -> int:
        for index, parameter in enumerate(self._parameters):
            if parameter.name == name:
                return index
        raise KeyError(f"Invalid parameter name: {name}")

    @overload
    def __getitem__(self, key: int) -> Parameter: ...
    @overload
    def __getitem__(self, key: str) -> Parameter: ...

    def __getitem__(self, key: int | str) -> Parameter:
        if isinstance(key, str):
            return self._parameters[self._index_of(key)]
        return self._parameters[key]

    def __setitem__(self, key: int | str, value: Any) -> None:
        """Assign a new *value* to the parameter at position or name *key*."""
        self[key].change_value_to(value)

    def __len__(self) -> int:
        return len(self._parameters)

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and any(p.name == name for p in self._parameters)

    def contains_parameter(self, name: str) -> bool:
        if name is None:
            raise InvalidArgumentException("name", "must not be None")
        return name in self

    def get(self, name: str, default: Any = None) -> Any:
        """Return the current value of *name*, or *default* when absent."""
        if name in self:
            return self[name].value
        return default

    def names(self) -> list[str]:
        return [p.name for p in self._parameters]

    def to_call_arguments(self) -> tuple[tuple[Any, ...], dict[str, Any]]:
        """Rebuild ``(args, kwargs)`` for the real call from the current values."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in self._parameters:
            if parameter.kind in _POSITIONAL:
                args.append(parameter.value)
            elif parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                args.extend(parameter.value)
            elif parameter.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[parameter.name] = parameter.value
            else:
                kwargs.update(parameter.value)
        return tuple(args), kwargs

    def __repr__(self) -> str:
        items = ", ".join(f"{p.name}={p.value!r}" for p in self._parameters)
        return f"ParameterCollection({items})"
