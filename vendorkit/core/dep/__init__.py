"""包清单与依赖解析

- identity.py: 依赖引用解析与标识
- manifest.py: 包清单加载/保存/校验
- resources.py: 附属资源按平台筛选
- resolver.py: 传递依赖拉取与去重
"""

from vendorkit.core.dep.identity import DependencyIdentity, parse_reference
from vendorkit.core.dep.manifest import PackageManifest
from vendorkit.core.dep.models import CheckoutResult
from vendorkit.core.dep.resolver import DependencyResolver
from vendorkit.core.dep.resources import Resource, applicable_resources

__all__ = [
    "CheckoutResult",
    "DependencyIdentity",
    "DependencyResolver",
    "PackageManifest",
    "Resource",
    "applicable_resources",
    "parse_reference",
]
