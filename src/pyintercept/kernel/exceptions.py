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
"""Unified exception hierarchy for pyintercept.

All library exceptions inherit from PyInterceptException, enabling unified
error handling across modules.

Categories:
- ProxyCreationException: invalid inputs to the proxy factory, raised
  before any proxy exists
- InvocationException: programming errors detected while a single proxied
  call is being dispatched

Faults raised by the real instance are never wrapped: they are captured on
the invocation and re-raised unchanged.
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Base Exception
# =============================================================================


class PyInterceptException(Exception):
    """Base exception for all pyintercept errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CONTRACT_VIOLATION").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Proxy Creation Exceptions
# =============================================================================


class ProxyCreationException(PyInterceptException):
    """A proxy could not be built from the supplied inputs."""


class InvalidArgumentException(ProxyCreationException):
    """A required input is missing or of the wrong kind."""

    def __init__(self, argument: str, reason: str) -> None:
        self.argument = argument
        self.reason = reason
        super().__init__(
            message=f"Invalid argument '{argument}': {reason}",
            code="INVALID_ARGUMENT",
            context={"argument": argument},
        )


class ContractViolationException(ProxyCreationException):
    """The real instance does not provide every member of the interface."""

    def __init__(self, interface: type, instance_type: type, missing: list[str]) -> None:
        self.interface = interface
        self.instance_type = instance_type
        self.missing = missing
        super().__init__(
            message=(
                f"{instance_type.__name__} does not implement {interface.__name__}: "
                f"missing {', '.join(missing)}"
            ),
            code="CONTRACT_VIOLATION",
            context={
                "interface": interface.__qualname__,
                "instance_type": instance_type.__qualname__,
                "missing": list(missing),
            },
        )


# =============================================================================
# Invocation Exceptions
# =============================================================================


class InvocationException(PyInterceptException):
    """Misuse of a call context detected during dispatch."""


class CoercionException(InvocationException):
    """A substituted return value does not fit the member's declared return type.

    Raised at the proxy boundary so that an interceptor returning the wrong
    kind of value fails where the mistake was made, not later at the caller.
    """

    def __init__(self, method_name: str, declared: Any, value: Any) -> None:
        self.method_name = method_name
        self.declared = declared
        self.value = value
        declared_name = declared.__name__ if isinstance(declared, type) else repr(declared)
        value_type = type(value).__name__
        super().__init__(
            message=(
                f"Cannot coerce return value of {method_name}(): "
                f"declared {declared_name}, got {value_type}"
            ),
            code="COERCION_FAILED",
            context={"method": method_name, "declared": declared_name, "value_type": value_type},
        )


class InvocationStateException(InvocationException):
    """An invocation operation was used out of order (e.g. proceeding twice)."""
