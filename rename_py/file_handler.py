"""RenamePy - 路径工具
提供目录检查、目录项列举、重命名与复制等底层文件操作，供各重命名引擎共用。
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

from .config import get_log_level
from .errors import RootAccessError
from .models import DirEntry


class FileHandler:
    """底层文件操作。不吞异常，由调用方决定是中止还是记录后继续。"""

    def __init__(self, base_path: Optional[Union[str, Path]] = None, logger: Optional[logging.Logger] = None):
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.logger = logger or logging.getLogger(__name__)
        if not self.logger.handlers:
            self.logger.addHandler(logging.StreamHandler())
            self.logger.setLevel(get_log_level())

    def resolve(self, path_like: Union[str, Path]) -> Path:
        """相对路径按 base_path 解析。"""
        p = Path(path_like)
        if not p.is_absolute():
            p = self.base_path / p
        return p

    # 起始目录检查
    def require_directory(self, directory: Union[str, Path]) -> Path:
        path = self.resolve(directory)
        if not path.exists():
            raise RootAccessError(f"目录不存在: {path}")
        if not path.is_dir():
            raise RootAccessError(f"不是目录: {path}")
        return path

    # 列出目录项（按名称排序，每次调用都重新读取；符号链接不视为目录）
    def list_entries(self, directory: Union[str, Path]) -> List[DirEntry]:
        path = self.resolve(directory)
        with os.scandir(path) as it:
            entries = [DirEntry.from_os(e) for e in it]
        entries.sort(key=lambda e: e.name)
        return entries

    def list_subdirectories(self, directory: Union[str, Path]) -> List[DirEntry]:
        return [e for e in self.list_entries(directory) if e.is_dir]

    # 重命名文件；目标存在且不是同一个文件时报错
    def rename_file(self, old_path: Union[str, Path], new_path: Union[str, Path]) -> bool:
        old_p = self.resolve(old_path)
        new_p = self.resolve(new_path)
        if not old_p.exists():
            raise FileNotFoundError(f"源文件不存在: {old_p}")
        if new_p.exists() and not os.path.samefile(old_p, new_p):
            raise FileExistsError(f"目标已存在: {new_p}")
        old_p.rename(new_p)
        return True

    # 复制文件内容，覆盖已存在的目标
    def copy_file(self, src_path: Union[str, Path], dst_path: Union[str, Path]) -> bool:
        src = self.resolve(src_path)
        dst = self.resolve(dst_path)
        if not src.exists():
            raise FileNotFoundError(f"源文件不存在: {src}")
        shutil.copyfile(src, dst)
        return True

    # 创建目录
    def create_directory(self, dir_path: Union[str, Path], parents: bool = True) -> Path:
        path = self.resolve(dir_path)
        path.mkdir(parents=parents, exist_ok=True)
        self.logger.debug(f"目录创建完成: {path}")
        return path

    @staticmethod
    def extension_of(name: str) -> str:
        """最后一个点及其后的部分（含点）；没有点时返回空串。

        与 Path.suffix 不同，".bashrc" 的扩展名是 ".bashrc"。
        """
        idx = name.rfind(".")
        return name[idx:] if idx >= 0 else ""
