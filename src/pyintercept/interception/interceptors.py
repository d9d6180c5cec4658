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
"""Built-in interceptors: structured call logging and fault fallback."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from pyintercept.interception.interceptor import DefaultInterceptor
from pyintercept.interception.invocation import Invocation
from pyintercept.interception.properties import InterceptionProperties
from pyintercept.kernel.exceptions import InvalidArgumentException
from pyintercept.logging.port import LoggingPort


class LoggingInterceptor(DefaultInterceptor):
    """Logs every call with its duration and outcome.

    Emits ``invocation_started`` before the real member runs and
    ``invocation_completed`` or ``invocation_failed`` after it. The level and
    whether argument values are included come from
    :class:`InterceptionProperties`; the logger comes from *logging_port*
    when one is given. Faults are logged, never suppressed.
    """

    def __init__(
        self,
        properties: InterceptionProperties | None = None,
        logger_name: str = "pyintercept.calls",
        logging_port: LoggingPort | None = None,
    ) -> None:
        props = properties or InterceptionProperties()
        self._level = props.log_level.lower()
        self._log_arguments = props.log_arguments
        self._logger = logging_port.get_logger(logger_name) if logging_port else structlog.get_logger(logger_name)

    def intercept(self, invocation: Invocation) -> None:
        self._started(invocation)
        invocation.proceed()
        self._finished(invocation)

    async def intercept_async(self, invocation: Invocation) -> None:
        self._started(invocation)
        await invocation.proceed_async()
        self._finished(invocation)

    def _started(self, invocation: Invocation) -> None:
        fields: dict[str, Any] = {"method": invocation.method.qualified_name}
        if self._log_arguments:
            fields["arguments"] = {p.name: p.value for p in invocation.arguments}
        getattr(self._logger, self._level)("invocation_started", **fields)

    def _finished(self, invocation: Invocation) -> None:
        elapsed_ms = round(invocation.elapsed_time.total_seconds() * 1000, 3)
        if invocation.exception is not None:
            self._logger.warning(
                "invocation_failed",
                method=invocation.method.qualified_name,
                error=repr(invocation.exception),
                elapsed_ms=elapsed_ms,
            )
            return
        getattr(self._logger, self._level)(
            "invocation_completed",
            method=invocation.method.qualified_name,
            elapsed_ms=elapsed_ms,
        )


class FallbackInterceptor(DefaultInterceptor):
    """Suppresses matching faults of the real member and substitutes a value.

    Exactly one of *fallback_method* or *fallback_value* should be provided.
    A fallback method receives the call's arguments plus the fault as the
    ``exc`` keyword argument and may be a coroutine function for
    asynchronous members.

    Args:
        fallback_method: Callable computing the substitute value.
        fallback_value: Static substitute value.
        on: Exception types to suppress (default: all exceptions).
        methods: Member names to engage on; all members when omitted.
    """

    def __init__(
        self,
        *,
        fallback_method: Callable[..., Any] | None = None,
        fallback_value: Any = None,
        on: tuple[type[Exception], ...] = (Exception,),
        methods: Iterable[str] | None = None,
    ) -> None:
        if fallback_method is None and fallback_value is None:
            raise InvalidArgumentException("fallback", "either fallback_method or fallback_value must be provided")
        self._fallback_method = fallback_method
        self._fallback_value = fallback_value
        self._on = on
        self._methods = frozenset(methods) if methods is not None else None

    def can_handle(self, invocation: Invocation) -> bool:
        return self._methods is None or invocation.method.name in self._methods

    def intercept(self, invocation: Invocation) -> None:
        invocation.proceed()
        if self._matches(invocation):
            self._substitute(invocation, self._compute(invocation))

    async def intercept_async(self, invocation: Invocation) -> None:
        await invocation.proceed_async()
        if self._matches(invocation):
            value = self._compute(invocation)
            if inspect.isawaitable(value):
                value = await value
            self._substitute(invocation, value)

    def _matches(self, invocation: Invocation) -> bool:
        return invocation.exception is not None and isinstance(invocation.exception, self._on)

    def _compute(self, invocation: Invocation) -> Any:
        if self._fallback_method is None:
            return self._fallback_value
        args, kwargs = invocation.arguments.to_call_arguments()
        return self._fallback_method(*args, exc=invocation.exception, **kwargs)

    @staticmethod
    def _substitute(invocation: Invocation, value: Any) -> None:
        invocation.re_throw_exception = False
        invocation.return_value = value
