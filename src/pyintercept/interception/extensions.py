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
"""Helpers for working with proxies and invocations."""

from __future__ import annotations

import inspect
from typing import Any

from pyintercept.interception.descriptors import resolve_return_shape
from pyintercept.interception.invocation import Invocation
from pyintercept.interception.proxy import InterceptorProxy


def is_proxy(obj: Any) -> bool:
    return isinstance(obj, InterceptorProxy)


def get_real_instance(obj: Invocation | Any) -> Any:
    """Return the real instance behind *obj*, unwrapping nested proxies.

    Accepts either a proxy (or plain object) or an :class:`Invocation`, in
    which case its target is unwrapped.
    """
    target = obj.target if isinstance(obj, Invocation) else obj
    while isinstance(target, InterceptorProxy):
        target = target.__pyintercept_instance__
    return target


def is_awaitable_type(annotation: Any) -> bool:
    """True when *annotation* is one of the recognised asynchronous return shapes.

    Example::

        is_awaitable_type(Awaitable[int])     # True
        is_awaitable_type(asyncio.Task[str])  # True
        is_awaitable_type(int)                # False
    """
    shape, _ = resolve_return_shape(_plain, annotation)
    return shape.is_async


def _plain() -> None: ...


async def get_real_return_value(invocation: Invocation) -> Any:
    """Return the invocation's value, awaiting it when the slot holds an awaitable.

    A real awaitable left pending by ``proceed()`` is settled on the
    invocation first, so a fault it raises lands in the exception slot.
    Unwrapping does not count as a substitution.
    """
    await invocation._settle()
    value = invocation.return_value
    if inspect.isawaitable(value):
        value = await value
        invocation._return_value = value
    return value
