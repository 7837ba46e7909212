"""RenamePy - 批量重命名工具

按正则替换或预定义规则（timestamp / sequence / lowercase / wx-exporter /
foldername-rename）批量重命名目录中的文件，并附带图片 EXIF 读取。
"""

__version__ = "0.1.0"
__author__ = "RenamePy Team"
__description__ = "批量重命名工具"

from .errors import RootAccessError, UsageError
from .file_handler import FileHandler
from .models import RenameOp, RenameReport, Rule
from .rename_engine import RenameEngine
from .folder_rename import FolderRenamer
from .wx_exporter import WxExporter
from .driver import run_mode, select_mode
from .image_handler import ImageHandler

__all__ = [
    "FileHandler",
    "ImageHandler",
    "RenameEngine",
    "FolderRenamer",
    "WxExporter",
    "RenameOp",
    "RenameReport",
    "Rule",
    "RootAccessError",
    "UsageError",
    "run_mode",
    "select_mode",
]
