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
"""Runtime interception: proxies, call contexts and interceptors."""

from pyintercept.interception.context import current_invocation, invocation_scope
from pyintercept.interception.descriptors import MemberKind, MethodDescriptor, ReturnShape, scan_interface
from pyintercept.interception.extensions import (
    get_real_instance,
    get_real_return_value,
    is_awaitable_type,
    is_proxy,
)
from pyintercept.interception.factory import ProxyFactory, create_proxy
from pyintercept.interception.interceptor import DefaultInterceptor, Interceptor
from pyintercept.interception.interceptors import FallbackInterceptor, LoggingInterceptor
from pyintercept.interception.invocation import Invocation, InvocationState
from pyintercept.interception.parameters import Parameter, ParameterCollection
from pyintercept.interception.post_processor import InterceptorBeanPostProcessor
from pyintercept.interception.properties import InterceptionProperties
from pyintercept.interception.proxy import InterceptorProxy

__all__ = [
    "DefaultInterceptor",
    "FallbackInterceptor",
    "InterceptionProperties",
    "Interceptor",
    "InterceptorBeanPostProcessor",
    "InterceptorProxy",
    "Invocation",
    "InvocationState",
    "LoggingInterceptor",
    "MemberKind",
    "MethodDescriptor",
    "Parameter",
    "ParameterCollection",
    "ProxyFactory",
    "ReturnShape",
    "create_proxy",
    "current_invocation",
    "get_real_instance",
    "get_real_return_value",
    "is_awaitable_type",
    "invocation_scope",
    "is_proxy",
    "scan_interface",
]
