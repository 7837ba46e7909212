"""RenamePy 异常定义。"""


class UsageError(ValueError):
    """参数缺失、互斥参数同时出现、未知规则或非法正则。不做任何遍历。"""


class RootAccessError(FileNotFoundError):
    """起始目录不存在、不是目录或无法读取，整个操作中止。"""
