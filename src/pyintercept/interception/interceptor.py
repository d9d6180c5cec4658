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
"""Interceptor contract and the default pass-through policy."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from pyintercept.interception.invocation import Invocation


@runtime_checkable
class Interceptor(Protocol):
    """Pluggable policy applied to every call made through a proxy.

    ``can_handle`` decides whether the policy engages for a call. When it
    does, the proxy calls ``intercept`` for synchronous members and awaits
    ``intercept_async`` for asynchronous ones. A hook may run the real
    member through ``invocation.proceed()`` at most once, substitute a
    value, or record and suppress a fault. An asynchronous hook that needs
    the awaited outcome of the real call uses ``invocation.proceed_async()``.

    One interceptor instance may serve many concurrent calls, so per-call
    state belongs on the :class:`Invocation`.
    """

    def can_handle(self, invocation: Invocation) -> bool: ...

    def intercept(self, invocation: Invocation) -> None: ...

    async def intercept_async(self, invocation: Invocation) -> None: ...


class DefaultInterceptor:
    """Base interceptor: always engages and lets the call proceed.

    Subclasses usually override :meth:`intercept`; the asynchronous hook
    yields once to the event loop and then delegates to it, so purely
    synchronous logic also serves asynchronous members. ``proceed()``
    starts the real coroutine eagerly, so a real call that completes
    without suspending has its value or fault visible to ``intercept``
    just as a synchronous one would. A real call that suspends is still
    running when ``intercept`` returns and is settled by the proxy
    afterwards; override :meth:`intercept_async` and use
    ``await invocation.proceed_async()`` when the hook must inspect the
    outcome of such calls.
    """

    def can_handle(self, invocation: Invocation) -> bool:
        return True

    def intercept(self, invocation: Invocation) -> None:
        invocation.proceed()

    async def intercept_async(self, invocation: Invocation) -> None:
        await asyncio.sleep(0)
        self.intercept(invocation)
