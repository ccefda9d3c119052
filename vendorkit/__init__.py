"""vendorkit - 基于代码托管平台的包清单与依赖解析工具"""

__version__ = "0.1.0"
