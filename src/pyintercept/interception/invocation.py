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
"""Invocation — the per-call context handed to interceptors."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Mapping
from datetime import timedelta
from enum import Enum
from typing import Any

from pyintercept.interception.descriptors import MemberKind, MethodDescriptor
from pyintercept.interception.parameters import ParameterCollection
from pyintercept.kernel.exceptions import InvocationStateException


class InvocationState(str, Enum):
    """Lifecycle of a single proxied call.

    ``CREATED -> DISPATCHED -> {PROCEEDED | SUBSTITUTED} -> {FAULTED | COMPLETED}``
    """

    CREATED = "created"
    DISPATCHED = "dispatched"
    PROCEEDED = "proceeded"
    SUBSTITUTED = "substituted"
    FAULTED = "faulted"
    COMPLETED = "completed"


class Invocation:
    """Record of one call made through a proxy.

    Created by the proxy for every intercepted call and discarded when the
    call returns; it is never shared between calls. Exactly one of
    :attr:`exception` and :attr:`return_value` is authoritative: assigning
    one clears the other.

    Attributes:
        re_throw_exception: When ``True`` (default) a captured exception is
            raised to the caller once interception finishes. When ``False``
            the call counts as handled and :attr:`return_value` is returned.
    """

    def __init__(
        self,
        method: MethodDescriptor,
        target: Any,
        interface_type: type,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> None:
        self._method = method
        self._target = target
        self._interface_type = interface_type
        self._arguments = ParameterCollection.bind(method.signature, args, kwargs or {}, method.type_hints)
        self._return_value: Any = None
        self._exception: Exception | None = None
        self._elapsed_time = timedelta(0)
        self._pending: Awaitable[Any] | None = None
        self._pending_started = 0.0
        self._pending_outcome_kept = True
        self._proceeded = False
        self._substituted = False
        self._state = InvocationState.CREATED
        self.re_throw_exception = True

    # ------------------------------------------------------------------
    # Read-only context
    # ------------------------------------------------------------------

    @property
    def method(self) -> MethodDescriptor:
        return self._method

    @property
    def target(self) -> Any:
        return self._target

    @property
    def interface_type(self) -> type:
        return self._interface_type

    @property
    def arguments(self) -> ParameterCollection:
        return self._arguments

    @property
    def elapsed_time(self) -> timedelta:
        """Duration of the real call; ``timedelta(0)`` until it has run."""
        return self._elapsed_time

    @property
    def state(self) -> InvocationState:
        return self._state

    @property
    def proceeded(self) -> bool:
        return self._proceeded

    # ------------------------------------------------------------------
    # Outcome slots
    # ------------------------------------------------------------------

    @property
    def return_value(self) -> Any:
        return self._return_value

    @return_value.setter
    def return_value(self, value: Any) -> None:
        if self._proceeded and self._exception is None and value is self._return_value:
            # Handing back the real result (or its pending awaitable) is not a substitution.
            return
        self._drop_pending_outcome()
        self._exception = None
        self._return_value = value
        self._substituted = True
        self._mark_substituted()

    @property
    def exception(self) -> Exception | None:
        return self._exception

    @exception.setter
    def exception(self, exc: Exception | None) -> None:
        self._drop_pending_outcome()
        self._exception = exc
        self._return_value = None
        self._mark_substituted()

    # ------------------------------------------------------------------
    # Running the real member
    # ------------------------------------------------------------------

    def proceed(self) -> None:
        """Run the real member with the current argument values.

        For asynchronous members the real coroutine is started as an eager
        task on the running loop. When it finishes without suspending, its
        value or fault is in the outcome slots as soon as ``proceed()``
        returns, exactly as for a synchronous member. Otherwise the slot
        holds the running task and the proxy awaits it once the hook has
        returned; hooks that must see the outcome of such a call use
        :meth:`proceed_async`.
        """
        self._begin()
        started = time.perf_counter()
        try:
            result = self._call_target()
        except Exception as exc:
            self._record_elapsed(started)
            self._exception = exc
            return

        if self._method.is_async and inspect.isawaitable(result):
            self._start_pending(result, started)
            return
        self._record_elapsed(started)
        self._return_value = result

    async def proceed_async(self) -> None:
        """Run the real member and await it, capturing value or fault."""
        if not self._method.is_async:
            self.proceed()
            return

        self._begin()
        started = time.perf_counter()
        try:
            result = self._call_target()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            self._exception = exc
        else:
            self._return_value = result
        finally:
            self._record_elapsed(started)

    # ------------------------------------------------------------------
    # Proxy-side lifecycle
    # ------------------------------------------------------------------

    def _dispatch(self) -> None:
        self._state = InvocationState.DISPATCHED

    async def _settle(self) -> None:
        """Await a real awaitable started by :meth:`proceed`, if one is pending.

        After a substitution the real call still runs to completion, but its
        outcome no longer replaces the substituted slots.
        """
        pending, self._pending = self._pending, None
        if pending is None:
            return
        keep, self._pending_outcome_kept = self._pending_outcome_kept, True
        try:
            result = await pending
        except Exception as exc:
            if keep:
                self._return_value = None
                self._exception = exc
        else:
            if keep:
                self._return_value = result
        finally:
            self._record_elapsed(self._pending_started)

    def _complete(self) -> None:
        if self._exception is not None and self.re_throw_exception:
            self._state = InvocationState.FAULTED
        else:
            self._state = InvocationState.COMPLETED

    def _begin(self) -> None:
        if self._proceeded:
            raise InvocationStateException(
                f"{self._method.qualified_name}: proceed() may run only once per invocation",
                code="INVOCATION_STATE",
            )
        self._proceeded = True
        self._state = InvocationState.PROCEEDED

    def _call_target(self) -> Any:
        member = getattr(self._target, self._method.name)
        if self._method.kind is MemberKind.PROPERTY:
            return member
        args, kwargs = self._arguments.to_call_arguments()
        return member(*args, **kwargs)

    def _record_elapsed(self, started: float) -> None:
        self._elapsed_time = timedelta(seconds=time.perf_counter() - started)

    def _mark_substituted(self) -> None:
        if self._state in (InvocationState.CREATED, InvocationState.DISPATCHED):
            self._state = InvocationState.SUBSTITUTED

    def _start_pending(self, awaitable: Awaitable[Any], started: float) -> None:
        if inspect.iscoroutine(awaitable):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                awaitable = asyncio.Task(awaitable, loop=loop, eager_start=True)

        if asyncio.isfuture(awaitable) and awaitable.done():
            self._record_elapsed(started)
            try:
                self._return_value = awaitable.result()
            except Exception as exc:
                self._exception = exc
            return

        self._pending = awaitable
        self._pending_started = started
        self._pending_outcome_kept = True
        self._return_value = awaitable

    def _drop_pending_outcome(self) -> None:
        if self._pending is not None:
            self._pending_outcome_kept = False

    def _discard_pending(self) -> None:
        """Abandon a pending real call when the hook itself has failed."""
        pending, self._pending = self._pending, None
        if inspect.iscoroutine(pending):
            pending.close()
        elif asyncio.isfuture(pending):
            pending.cancel()

    def __repr__(self) -> str:
        return f"<Invocation {self._method.qualified_name} state={self._state.value}>"
