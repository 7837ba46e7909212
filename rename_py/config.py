"""RenamePy 配置常量。

不做任何持久化配置，仅提供默认值以及从环境变量读取的日志级别。
"""

import logging
import os

# wx-exporter 默认输出目录
DEFAULT_OUTPUT_DIR = "wx-export"
# path2 下存放图片的固定子目录名
ASSETS_DIR_NAME = "assets"
# wx-exporter 只导出这些扩展名（小写比较）
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
# exif 命令支持的扩展名
EXIF_EXTENSIONS = (".jpg", ".jpeg", ".tiff", ".tif")

SEQUENCE_WIDTH = 3
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

LOG_LEVEL_ENV = "RENAMEPY_LOG_LEVEL"


def get_log_level(default: int = logging.INFO) -> int:
    """读取 RENAMEPY_LOG_LEVEL（如 DEBUG / WARNING），无效值回退到 default。"""
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default
