"""pkgservice - 包清单解析、平台选择、制品下载与结果上报"""

__version__ = "0.1.0"
