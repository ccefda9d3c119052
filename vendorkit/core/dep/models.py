"""依赖拉取结果数据模型"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class CheckoutResult:
    """拉取器检出一个依赖后的结果

    ref 为实际命中的标签名；按 SHA 或默认分支检出时与 commit 相同。
    """

    path: Path
    commit: str
    ref: str = ""
