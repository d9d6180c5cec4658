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
"""Member descriptors — interface scanning and return-shape resolution.

An interface is scanned once; the resulting descriptors carry everything the
proxy needs at call time: the formal parameters (receiver excluded), the
dispatch mode and the declared return type. For asynchronous members the
declared return type is the *inner* type of the wrapper, resolved from the
signature and never from a runtime value.
"""

from __future__ import annotations

import abc
import asyncio
import collections.abc
import functools
import inspect
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, get_args, get_origin

# Identity operations every object has; never intercepted.
BYPASS_MEMBERS: frozenset[str] = frozenset(
    {"__eq__", "__ne__", "__hash__", "__repr__", "__str__", "__format__", "__dir__"}
)

# Construction and attribute plumbing; never part of an interface contract.
_IGNORED_MEMBERS: frozenset[str] = frozenset(
    {
        "__init__",
        "__new__",
        "__init_subclass__",
        "__subclasshook__",
        "__class_getitem__",
        "__getattr__",
        "__getattribute__",
        "__setattr__",
        "__delattr__",
        "__post_init__",
    }
)

_SKIPPED_BASES: tuple[type, ...] = (object, typing.Protocol, typing.Generic, abc.ABC)  # type: ignore[arg-type]


class ReturnShape(Enum):
    """Declared return shape of a member, which selects the dispatch mode."""

    VOID = auto()
    VALUE = auto()
    COROUTINE = auto()
    AWAITABLE = auto()
    FUTURE = auto()

    @property
    def is_async(self) -> bool:
        return self in (ReturnShape.COROUTINE, ReturnShape.AWAITABLE, ReturnShape.FUTURE)


class MemberKind(Enum):
    METHOD = auto()
    PROPERTY = auto()


@dataclass(frozen=True)
class MethodDescriptor:
    """Static metadata for one interface member.

    Attributes:
        name: Member name as declared on the interface.
        interface: The interface type that declares the member.
        signature: Formal parameters, receiver excluded.
        return_shape: Dispatch mode derived from the declared return shape.
        return_type: Declared return type; for asynchronous shapes, the
            inner type of the wrapper (``None`` for a bare wrapper).
        kind: Method or property getter.
        type_hints: Resolved annotations of the member.
    """

    name: str
    interface: type
    signature: inspect.Signature
    return_shape: ReturnShape
    return_type: Any
    kind: MemberKind = MemberKind.METHOD
    type_hints: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.interface.__qualname__}.{self.name}"

    @property
    def is_async(self) -> bool:
        return self.return_shape.is_async

    @property
    def is_bare(self) -> bool:
        """True for an asynchronous member that eventually completes with no value."""
        return self.is_async and self.return_type in (None, type(None))

    @property
    def parameters(self) -> list[inspect.Parameter]:
        return list(self.signature.parameters.values())


def is_interface(cls: Any) -> bool:
    """Return True for a Protocol class or an abstract base class."""
    if not inspect.isclass(cls):
        return False
    return bool(getattr(cls, "_is_protocol", False)) or inspect.isabstract(cls)


def resolve_return_shape(func: Callable[..., Any], annotation: Any) -> tuple[ReturnShape, Any]:
    """Derive ``(shape, declared type)`` from a member and its return annotation."""
    if annotation is inspect.Signature.empty:
        annotation = Any

    if inspect.iscoroutinefunction(func):
        return ReturnShape.COROUTINE, annotation

    if annotation is None or annotation is type(None):
        return ReturnShape.VOID, None

    origin = get_origin(annotation) or annotation
    args = get_args(annotation)
    if isinstance(origin, type):
        if issubclass(origin, asyncio.Future):
            return ReturnShape.FUTURE, args[0] if args else Any
        if origin is collections.abc.Coroutine:
            return ReturnShape.AWAITABLE, args[2] if len(args) == 3 else Any
        if origin is collections.abc.Awaitable:
            return ReturnShape.AWAITABLE, args[0] if args else Any

    return ReturnShape.VALUE, annotation


def _type_hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception:
        # Unresolvable forward references: keep the raw annotations.
        return dict(getattr(func, "__annotations__", {}))


def _without_receiver(signature: inspect.Signature) -> inspect.Signature:
    params = list(signature.parameters.values())
    return signature.replace(parameters=params[1:])


def _describe(interface: type, name: str, func: Callable[..., Any], kind: MemberKind) -> MethodDescriptor:
    hints = _type_hints(func)
    signature = _without_receiver(inspect.signature(func))
    shape, return_type = resolve_return_shape(func, hints.get("return", signature.return_annotation))
    return MethodDescriptor(
        name=name,
        interface=interface,
        signature=signature,
        return_shape=shape,
        return_type=return_type,
        kind=kind,
        type_hints=MappingProxyType(hints),
    )


def _is_member_name(name: str, value: Any) -> bool:
    if name in _IGNORED_MEMBERS or name in BYPASS_MEMBERS:
        return False
    if name.startswith("__") and name.endswith("__"):
        return True
    if name.startswith("_"):
        return bool(getattr(value, "__isabstractmethod__", False))
    return True


@functools.cache
def scan_interface(interface: type) -> Mapping[str, MethodDescriptor]:
    """Collect the descriptors of every member *interface* declares.

    Walks the MRO from the most generic base down so that redeclared
    members take the most derived signature. Static and class methods are
    inherited by the proxy unchanged and are not described.
    """
    members: dict[str, MethodDescriptor] = {}
    for klass in reversed(interface.__mro__):
        if klass in _SKIPPED_BASES:
            continue
        for name, value in vars(klass).items():
            if isinstance(value, (staticmethod, classmethod)) or not _is_member_name(name, value):
                continue
            if inspect.isfunction(value):
                members[name] = _describe(interface, name, value, MemberKind.METHOD)
            elif isinstance(value, property) and value.fget is not None:
                members[name] = _describe(interface, name, value.fget, MemberKind.PROPERTY)
    return MappingProxyType(members)
