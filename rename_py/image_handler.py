"""RenamePy - 图片 EXIF 读取
依赖：Pillow (PIL) 负责解码，本模块只做扩展名校验、目录遍历和输出格式化。
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from PIL import ExifTags, Image, TiffImagePlugin

from .config import EXIF_EXTENSIONS, get_log_level

# EXIF 子 IFD 指针
_EXIF_IFD = 0x8769
_GPS_IFD = 0x8825

OUTPUT_FORMATS = ("text", "json")


class ImageHandler:
    """图片元数据读取器，支持 JPEG / TIFF。"""

    def __init__(self, base_path: Optional[Union[str, Path]] = None, logger: Optional[logging.Logger] = None):
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.logger = logger or logging.getLogger(__name__)
        if not self.logger.handlers:
            self.logger.addHandler(logging.StreamHandler())
            self.logger.setLevel(get_log_level())

    def _resolve(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        if not p.is_absolute():
            p = self.base_path / p
        return p

    @staticmethod
    def is_supported(path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in EXIF_EXTENSIONS

    # 读取单张图片的 EXIF
    def read_exif(self, image_path: Union[str, Path]) -> Dict[str, Any]:
        """返回 {标签名: 值}，包含主 IFD 与 Exif 子 IFD；有 GPS 时附加十进制经纬度。

        文件不存在抛 FileNotFoundError；扩展名不受支持或没有 EXIF 抛 ValueError。
        扩展名在解码前校验。
        """
        p = self._resolve(image_path)
        if not p.exists():
            raise FileNotFoundError(f"图片不存在: {p}")
        if not self.is_supported(p):
            raise ValueError(
                f"不支持的图片格式: {p.suffix.lower() or '(无扩展名)'}"
                f"（支持: {', '.join(e.lstrip('.') for e in EXIF_EXTENSIONS)}）"
            )

        with Image.open(p) as img:
            raw_exif = img.getexif()
            if not raw_exif:
                raise ValueError(f"图片不包含 EXIF 数据: {p}")
            result: Dict[str, Any] = {}
            for tag_id, value in raw_exif.items():
                if tag_id in (_EXIF_IFD, _GPS_IFD):
                    continue
                result[ExifTags.TAGS.get(tag_id, str(tag_id))] = _plain(value)
            for tag_id, value in raw_exif.get_ifd(_EXIF_IFD).items():
                result[ExifTags.TAGS.get(tag_id, str(tag_id))] = _plain(value)
            gps = raw_exif.get_ifd(_GPS_IFD)
            for tag_id, value in gps.items():
                result[ExifTags.GPSTAGS.get(tag_id, str(tag_id))] = _plain(value)

        coords = gps_coordinates(gps)
        if coords is not None:
            result["GPS_Latitude"], result["GPS_Longitude"] = coords
        self.logger.debug(f"读取 EXIF：{p}，共 {len(result)} 个标签")
        return result

    # 读取目录中所有受支持图片的 EXIF
    def read_exif_dir(self, directory: Union[str, Path], recursive: bool = False
                      ) -> List[Tuple[Path, Union[Dict[str, Any], str]]]:
        """返回 [(路径, 标签字典或错误信息)]。单个文件失败只记录，不中止。"""
        base = self._resolve(directory)
        if not base.exists():
            raise FileNotFoundError(f"目录不存在: {base}")
        if not base.is_dir():
            raise NotADirectoryError(f"不是目录: {base}")

        results: List[Tuple[Path, Union[Dict[str, Any], str]]] = []
        for root, dirs, files in os.walk(base, onerror=self._walk_error):
            dirs.sort()
            if not recursive:
                dirs.clear()
            for name in sorted(files):
                path = Path(root) / name
                if not self.is_supported(path):
                    continue
                try:
                    results.append((path, self.read_exif(path)))
                except (OSError, ValueError) as e:
                    self.logger.warning(f"Warning: Failed to process {path}: {e}")
                    results.append((path, str(e)))
        return results

    def _walk_error(self, err: OSError) -> None:
        self.logger.warning(f"Warning: Error accessing {err.filename}: {err}")


def _plain(value: Any) -> Any:
    """把 Pillow 的取值转换为可 JSON 序列化的基础类型。"""
    if isinstance(value, TiffImagePlugin.IFDRational):
        return float(value) if value.denominator else str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").rstrip("\x00")
    if isinstance(value, (tuple, list)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    return value


def _degrees(dms: Any) -> float:
    d, m, s = (float(x) for x in dms)
    return d + m / 60.0 + s / 3600.0


def gps_coordinates(gps: Dict[int, Any]) -> Optional[Tuple[float, float]]:
    """GPS IFD -> (纬度, 经度)，南纬/西经为负；信息不全时返回 None。"""
    try:
        lat = _degrees(gps[2])
        lon = _degrees(gps[4])
    except (KeyError, TypeError, ValueError, ZeroDivisionError):
        return None
    if str(gps.get(1, "N")).upper().startswith("S"):
        lat = -lat
    if str(gps.get(3, "E")).upper().startswith("W"):
        lon = -lon
    return lat, lon


def format_exif(tags: Dict[str, Any], fmt: str = "text") -> str:
    """text: 每行 "%-30s: %s"；json: 缩进的 JSON 对象。"""
    if fmt == "json":
        return json.dumps(tags, ensure_ascii=False, indent=2, default=str)
    if fmt != "text":
        raise ValueError(f"不支持的输出格式: {fmt}（可选: {', '.join(OUTPUT_FORMATS)}）")
    lines = []
    for name, value in tags.items():
        if name in ("GPS_Latitude", "GPS_Longitude"):
            continue
        lines.append("%-30s: %s" % (name, value))
    if "GPS_Latitude" in tags and "GPS_Longitude" in tags:
        lines.append("%-30s: %f, %f" % ("GPS Coordinates", tags["GPS_Latitude"], tags["GPS_Longitude"]))
    return "\n".join(lines)
