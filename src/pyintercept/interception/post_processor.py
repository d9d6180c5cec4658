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
"""InterceptorBeanPostProcessor — wraps container beans in interceptor proxies."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Union

import structlog

from pyintercept.interception.descriptors import is_interface
from pyintercept.interception.extensions import get_real_instance
from pyintercept.interception.factory import ProxyFactory
from pyintercept.interception.interceptor import Interceptor
from pyintercept.interception.proxy import implements
from pyintercept.kernel.exceptions import InvalidArgumentException

logger = structlog.get_logger("pyintercept.interception")

InterceptorSource = Union[Interceptor, Callable[[], Interceptor]]


class InterceptorBeanPostProcessor:
    """BeanPostProcessor that puts registered interceptors in front of beans.

    Interfaces are registered with an interceptor instance, or with an
    interceptor class / zero-argument factory that is called once per
    wrapped bean. During ``after_init`` every bean whose real type
    implements a registered interface is replaced by a proxy; a bean that
    matches several registrations is wrapped once per registration, the
    first registration innermost.

    Usage::

        processor = InterceptorBeanPostProcessor()
        processor.register(OrderService, LoggingInterceptor)
        service = processor.after_init(processor.before_init(bean, "orders"), "orders")
    """

    def __init__(self, factory: ProxyFactory | None = None) -> None:
        self._factory = factory or ProxyFactory()
        self._registrations: list[tuple[type, InterceptorSource]] = []

    def register(self, interface: type, interceptor: InterceptorSource) -> None:
        """Intercept beans implementing *interface* with *interceptor*."""
        if interface is None or interceptor is None:
            raise InvalidArgumentException("interface" if interface is None else "interceptor", "must not be None")
        if not is_interface(interface):
            raise InvalidArgumentException("interface", f"{interface.__name__} must be an abstract base class or a Protocol")
        self._registrations.append((interface, interceptor))

    def before_init(self, bean: Any, bean_name: str) -> Any:
        return bean

    def after_init(self, bean: Any, bean_name: str) -> Any:
        """Wrap *bean* in a proxy for each matching registration."""
        if not self._factory.properties.enabled:
            return bean

        real = get_real_instance(bean)
        for interface, source in self._registrations:
            if not implements(interface, real):
                continue
            bean = self._factory.create_proxy(interface, self._resolve(source), bean)
            logger.debug("bean_intercepted", bean=bean_name, interface=interface.__qualname__)
        return bean

    @staticmethod
    def _resolve(source: InterceptorSource) -> Interceptor:
        if isinstance(source, type) or not isinstance(source, Interceptor):
            return source()  # type: ignore[operator]
        return source
