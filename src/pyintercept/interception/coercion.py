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
"""Return-value reconciliation — fit the return slot to the declared shape.

The declared type always comes from the member descriptor. A substituted
value may be ``None`` or an instance of a supertype, so its runtime type
says nothing reliable about what the caller expects.
"""

from __future__ import annotations

import inspect
import types
import typing
from typing import Any, Literal, TypeVar, Union, get_args, get_origin

from pyintercept.interception.descriptors import MethodDescriptor, ReturnShape
from pyintercept.kernel.exceptions import CoercionException


def conforms_to(value: Any, declared: Any) -> bool:
    """Check *value* against a declared annotation.

    ``None`` always conforms (an empty return slot). Annotations that
    cannot be checked at runtime (type variables, unresolved forward
    references, non-runtime protocols) are accepted.
    """
    if value is None or declared is Any or declared is object:
        return True
    if isinstance(declared, (str, TypeVar, typing.ForwardRef)):
        return True

    origin = get_origin(declared)
    if origin is Union or origin is types.UnionType:
        return any(conforms_to(value, arg) for arg in get_args(declared))
    if origin is Literal:
        return value in get_args(declared)
    if origin is typing.Annotated:
        return conforms_to(value, get_args(declared)[0])

    target = origin if origin is not None else declared
    # int is acceptable where float or complex is declared.
    if target is float:
        return isinstance(value, (int, float))
    if target is complex:
        return isinstance(value, (int, float, complex))
    if not isinstance(target, type):
        return True
    try:
        return isinstance(value, target)
    except TypeError:
        return True


def check_return_type(method: MethodDescriptor, value: Any) -> Any:
    """Return *value* unchanged, or raise CoercionException if it does not fit."""
    if not conforms_to(value, method.return_type):
        raise CoercionException(method.qualified_name, method.return_type, value)
    return value


def coerce_sync(method: MethodDescriptor, value: Any) -> Any:
    """Plain values pass through; a void member discards the slot."""
    if method.return_shape is ReturnShape.VOID:
        return None
    return value


async def coerce_async(method: MethodDescriptor, value: Any, validate: bool = True) -> Any:
    """Resolve the return slot of an asynchronous member to its inner value.

    A pre-wrapped awaitable is awaited. A bare wrapper always resolves to no
    value. A raw value is validated against the declared inner type; the
    proxy then delivers it in the declared wrapper shape.
    """
    if inspect.isawaitable(value):
        value = await value
    if method.is_bare:
        return None
    if validate:
        check_return_type(method, value)
    return value
