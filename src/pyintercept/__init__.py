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
"""pyintercept — runtime interface proxies with pluggable interceptors."""

from pyintercept.interception import (
    DefaultInterceptor,
    FallbackInterceptor,
    InterceptionProperties,
    Interceptor,
    InterceptorBeanPostProcessor,
    InterceptorProxy,
    Invocation,
    InvocationState,
    LoggingInterceptor,
    Parameter,
    ParameterCollection,
    ProxyFactory,
    create_proxy,
    current_invocation,
    get_real_instance,
    get_real_return_value,
    is_proxy,
)
from pyintercept.kernel.exceptions import (
    CoercionException,
    ContractViolationException,
    InvalidArgumentException,
    InvocationStateException,
    PyInterceptException,
)

__version__ = "0.1.0"

__all__ = [
    "CoercionException",
    "ContractViolationException",
    "DefaultInterceptor",
    "FallbackInterceptor",
    "InterceptionProperties",
    "Interceptor",
    "InterceptorBeanPostProcessor",
    "InterceptorProxy",
    "InvalidArgumentException",
    "Invocation",
    "InvocationState",
    "InvocationStateException",
    "LoggingInterceptor",
    "Parameter",
    "ParameterCollection",
    "ProxyFactory",
    "PyInterceptException",
    "create_proxy",
    "current_invocation",
    "get_real_instance",
    "get_real_return_value",
    "is_proxy",
]
