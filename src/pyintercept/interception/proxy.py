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
"""InterceptorProxy — runtime stand-in that routes interface calls through an interceptor.

One proxy class is synthesised per interface and cached. It subclasses the
interface, so proxies pass ``isinstance`` checks for ABCs and Protocols, and
it defines every declared member as a thin forwarder into a single dispatch
routine. The member's declared return shape decides whether the synchronous
or the asynchronous hook runs, and which wrapper the caller receives.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import types
from collections.abc import Callable, Coroutine
from typing import Any

import structlog

from pyintercept.interception.coercion import coerce_async, coerce_sync
from pyintercept.interception.context import invocation_scope
from pyintercept.interception.descriptors import (
    MemberKind,
    MethodDescriptor,
    ReturnShape,
    is_interface,
    scan_interface,
)
from pyintercept.interception.interceptor import Interceptor
from pyintercept.interception.invocation import Invocation
from pyintercept.kernel.exceptions import ContractViolationException, InvalidArgumentException

logger = structlog.get_logger("pyintercept.interception")


class InterceptorProxy:
    """Base class of every synthesised proxy.

    ``InterceptorProxy[Greeter]`` resolves the proxy class for ``Greeter``;
    instantiating it wraps a real instance::

        greeter = InterceptorProxy[Greeter](RealGreeter(), LoggingInterceptor())

    A proxy holds only immutable references: the real instance, the
    interceptor and the interface type. Identity operations and attributes
    the interface does not declare are forwarded to the real instance
    without engaging the interceptor.
    """

    __pyintercept_interface__: type

    def __init__(self, instance: Any, interceptor: Interceptor, *, validate_return_types: bool = True) -> None:
        interface = getattr(type(self), "__pyintercept_interface__", None)
        if interface is None:
            raise InvalidArgumentException("interface_type", "use InterceptorProxy[Interface](...)")
        if instance is None:
            raise InvalidArgumentException("instance", "must not be None")
        if interceptor is None:
            raise InvalidArgumentException("interceptor", "must not be None")
        if not isinstance(interceptor, Interceptor):
            raise InvalidArgumentException(
                "interceptor",
                f"{type(interceptor).__name__} must define can_handle(), intercept() and intercept_async()",
            )
        verify_contract(interface, instance)

        self.__pyintercept_instance__ = instance
        self.__pyintercept_interceptor__ = interceptor
        self.__pyintercept_validate__ = validate_return_types

    def __class_getitem__(cls, interface: type) -> type[InterceptorProxy]:
        return proxy_class_for(interface)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def __pyintercept_dispatch__(self, method: MethodDescriptor, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        invocation = Invocation(method, self.__pyintercept_instance__, self.__pyintercept_interface__, args, kwargs)
        with invocation_scope(invocation):
            return self.__pyintercept_run__(invocation)

    def __pyintercept_run__(self, invocation: Invocation) -> Any:
        interceptor = self.__pyintercept_interceptor__
        if not interceptor.can_handle(invocation):
            invocation.proceed()
            invocation._complete()
            if invocation.exception is not None:
                raise invocation.exception
            return invocation.return_value

        invocation._dispatch()
        try:
            interceptor.intercept(invocation)
        except Exception as exc:
            _log_interceptor_fault(interceptor, invocation.method, exc)
            raise

        invocation._complete()
        if invocation.exception is not None and invocation.re_throw_exception:
            raise invocation.exception
        return coerce_sync(invocation.method, invocation.return_value)

    async def __pyintercept_dispatch_async__(
        self, method: MethodDescriptor, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> Any:
        invocation = Invocation(method, self.__pyintercept_instance__, self.__pyintercept_interface__, args, kwargs)
        with invocation_scope(invocation):
            return await self.__pyintercept_run_async__(invocation)

    async def __pyintercept_run_async__(self, invocation: Invocation) -> Any:
        interceptor = self.__pyintercept_interceptor__
        if not interceptor.can_handle(invocation):
            await invocation.proceed_async()
            invocation._complete()
            if invocation.exception is not None:
                raise invocation.exception
            return invocation.return_value

        invocation._dispatch()
        try:
            await interceptor.intercept_async(invocation)
        except Exception as exc:
            invocation._discard_pending()
            _log_interceptor_fault(interceptor, invocation.method, exc)
            raise

        await invocation._settle()
        invocation._complete()
        if invocation.exception is not None and invocation.re_throw_exception:
            raise invocation.exception
        validate = self.__pyintercept_validate__ and invocation._substituted
        return await coerce_async(invocation.method, invocation.return_value, validate)

    # ------------------------------------------------------------------
    # Bypass
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__pyintercept"):
            raise AttributeError(name)
        return getattr(self.__pyintercept_instance__, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("__pyintercept"):
            object.__setattr__(self, name, value)
        else:
            setattr(self.__pyintercept_instance__, name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("__pyintercept"):
            object.__delattr__(self, name)
        else:
            delattr(self.__pyintercept_instance__, name)

    def __eq__(self, other: object) -> bool:
        return self.__pyintercept_instance__.__eq__(other)

    def __ne__(self, other: object) -> bool:
        return self.__pyintercept_instance__.__ne__(other)

    def __hash__(self) -> int:
        return hash(self.__pyintercept_instance__)

    def __repr__(self) -> str:
        return repr(self.__pyintercept_instance__)

    def __str__(self) -> str:
        return str(self.__pyintercept_instance__)

    def __format__(self, format_spec: str) -> str:
        return format(self.__pyintercept_instance__, format_spec)

    def __dir__(self) -> list[str]:
        return dir(self.__pyintercept_instance__)


def _log_interceptor_fault(interceptor: Interceptor, method: MethodDescriptor, exc: Exception) -> None:
    logger.debug(
        "interceptor_fault",
        method=method.qualified_name,
        interceptor=type(interceptor).__name__,
        error=repr(exc),
    )


def _schedule(coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        raise
    return loop.create_task(coro)


# ---------------------------------------------------------------------------
# Contract checking
# ---------------------------------------------------------------------------


def implements(interface: type, instance: Any) -> bool:
    """Nominal check: the instance type subclasses (or is registered with) *interface*."""
    try:
        return issubclass(type(instance), interface)
    except TypeError:
        # Protocols that are not runtime-checkable refuse issubclass().
        return False


def verify_contract(interface: type, instance: Any) -> None:
    """Raise ContractViolationException unless *instance* provides every member."""
    if implements(interface, instance):
        return
    missing = []
    for name, method in scan_interface(interface).items():
        if not hasattr(instance, name):
            missing.append(name)
        elif method.kind is MemberKind.METHOD and not callable(getattr(instance, name)):
            missing.append(name)
    if missing:
        raise ContractViolationException(interface, type(instance), missing)


# ---------------------------------------------------------------------------
# Proxy class synthesis
# ---------------------------------------------------------------------------


def _signature_with_receiver(method: MethodDescriptor) -> inspect.Signature:
    receiver = inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return method.signature.replace(parameters=[receiver, *method.parameters])


def _caller(method: MethodDescriptor) -> Callable[[InterceptorProxy, tuple[Any, ...], dict[str, Any]], Any]:
    """Return a function producing the member's result in its declared shape."""
    shape = method.return_shape

    if shape is ReturnShape.FUTURE:

        def call(proxy: InterceptorProxy, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
            return _schedule(proxy.__pyintercept_dispatch_async__(method, args, kwargs))

    elif shape.is_async:

        def call(proxy: InterceptorProxy, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
            return proxy.__pyintercept_dispatch_async__(method, args, kwargs)

    else:

        def call(proxy: InterceptorProxy, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
            return proxy.__pyintercept_dispatch__(method, args, kwargs)

    return call


def _build_method(method: MethodDescriptor) -> Callable[..., Any]:
    call = _caller(method)

    if method.return_shape is ReturnShape.COROUTINE:

        async def member(self: InterceptorProxy, *args: Any, **kwargs: Any) -> Any:
            return await call(self, args, kwargs)

    else:

        def member(self: InterceptorProxy, *args: Any, **kwargs: Any) -> Any:  # type: ignore[misc]
            return call(self, args, kwargs)

    declared = getattr(method.interface, method.name)
    member.__name__ = method.name
    member.__qualname__ = f"{method.interface.__qualname__}Proxy.{method.name}"
    member.__doc__ = declared.__doc__
    member.__signature__ = _signature_with_receiver(method)  # type: ignore[attr-defined]
    return member


def _build_property(method: MethodDescriptor) -> property:
    call = _caller(method)

    def fget(self: InterceptorProxy) -> Any:
        return call(self, (), {})

    def fset(self: InterceptorProxy, value: Any) -> None:
        setattr(self.__pyintercept_instance__, method.name, value)

    return property(fget, fset, doc=getattr(method.interface, method.name).__doc__)


@functools.cache
def proxy_class_for(interface: type) -> type[InterceptorProxy]:
    """Synthesise (once) the proxy class implementing *interface*."""
    if not is_interface(interface):
        raise InvalidArgumentException(
            "interface_type",
            f"{getattr(interface, '__name__', repr(interface))} must be an abstract base class or a Protocol",
        )

    namespace: dict[str, Any] = {
        "__pyintercept_interface__": interface,
        "__module__": interface.__module__,
        "__qualname__": f"{interface.__qualname__}Proxy",
    }
    for name, method in scan_interface(interface).items():
        if method.kind is MemberKind.PROPERTY:
            namespace[name] = _build_property(method)
        else:
            namespace[name] = _build_method(method)

    proxy_cls = types.new_class(
        f"{interface.__name__}Proxy",
        (InterceptorProxy, interface),
        exec_body=lambda ns: ns.update(namespace),
    )

    unresolved = sorted(getattr(proxy_cls, "__abstractmethods__", ()))
    if unresolved:
        raise InvalidArgumentException(
            "interface_type",
            f"{interface.__name__} declares abstract members that cannot be proxied: {', '.join(unresolved)}",
        )
    return proxy_cls
