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
"""Proxy factory — statically and dynamically typed entry points."""

from __future__ import annotations

import inspect
from typing import Any, TypeVar, cast, get_origin

import structlog

from pyintercept.core.config import Config
from pyintercept.interception.interceptor import Interceptor
from pyintercept.interception.properties import InterceptionProperties
from pyintercept.interception.proxy import InterceptorProxy
from pyintercept.kernel.exceptions import InvalidArgumentException

T = TypeVar("T")

logger = structlog.get_logger("pyintercept.interception")


class ProxyFactory:
    """Builds interceptor proxies for interfaces known only at runtime.

    Usage::

        factory = ProxyFactory.from_config(Config.from_file("pyintercept.yaml"))
        service = factory.create_proxy(interface_type, interceptor, instance)
    """

    def __init__(self, properties: InterceptionProperties | None = None) -> None:
        self._properties = properties or InterceptionProperties()

    @classmethod
    def from_config(cls, config: Config) -> ProxyFactory:
        return cls(config.bind(InterceptionProperties))

    @property
    def properties(self) -> InterceptionProperties:
        return self._properties

    def create_proxy(self, interface_type: Any, interceptor: Interceptor, instance: Any) -> Any:
        """Wrap *instance* so every member of *interface_type* goes through *interceptor*.

        Raises:
            InvalidArgumentException: An input is None, *interface_type* is
                not an ABC or Protocol, or *interceptor* lacks the hooks.
            ContractViolationException: *instance* does not provide every
                member of *interface_type*.
        """
        if interface_type is None:
            raise InvalidArgumentException("interface_type", "must not be None")
        if interceptor is None:
            raise InvalidArgumentException("interceptor", "must not be None")
        if instance is None:
            raise InvalidArgumentException("instance", "must not be None")

        # Subscripted generic interfaces (Repository[Order]) proxy their origin.
        origin = get_origin(interface_type)
        if inspect.isclass(origin):
            interface_type = origin

        proxy = InterceptorProxy[interface_type](
            instance,
            interceptor,
            validate_return_types=self._properties.validate_return_types,
        )
        logger.debug(
            "proxy_created",
            interface=interface_type.__qualname__,
            instance_type=type(instance).__qualname__,
            interceptor=type(interceptor).__name__,
        )
        return proxy


_default_factory = ProxyFactory()


def create_proxy(interface: type[T], interceptor: Interceptor, instance: T) -> T:
    """Statically typed entry point: the proxy is typed as *interface*.

    Example::

        greeter: Greeter = create_proxy(Greeter, LoggingInterceptor(), RealGreeter())
    """
    return cast(T, _default_factory.create_proxy(interface, interceptor, instance))
