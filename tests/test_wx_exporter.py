import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from rename_py import FileHandler, RootAccessError, WxExporter
from rename_py.models import Action


def _names(d: Path):
    return sorted(p.name for p in d.iterdir())


def _asset(path1: Path, path2: str, name: str, content: bytes = b"img") -> Path:
    assets = path1 / path2 / "assets"
    assets.mkdir(parents=True, exist_ok=True)
    p = assets / name
    p.write_bytes(content)
    return p


class TestWxExporter:
    @pytest.fixture
    def exporter(self):
        return WxExporter(FileHandler())

    @pytest.fixture
    def tmpdir(self):
        d = Path(tempfile.mkdtemp())
        yield d
        shutil.rmtree(d)

    @pytest.fixture
    def path1(self, tmpdir: Path) -> Path:
        p = tmpdir / "mysite"
        p.mkdir()
        return p

    def test_documented_scenario(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        _asset(path1, "page1", "img.png", b"png-data")
        _asset(path1, "page2", "icon.jpg", b"jpg-data")
        out = tmpdir / "out"
        report = exporter.export(path1, out, prefix="site")
        assert _names(out) == ["site_page1_001.png", "site_page2_001.jpg"]
        assert (out / "site_page1_001.png").read_bytes() == b"png-data"
        assert all(op.action is Action.COPY for op in report.done)
        # 源文件保留
        assert (path1 / "page1" / "assets" / "img.png").exists()

    def test_sequences_are_per_path2(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        for name in ("c.gif", "a.png", "b.webp"):
            _asset(path1, "home", name)
        _asset(path1, "about", "z.jpeg")
        out = tmpdir / "out"
        exporter.export(path1, out)
        assert _names(out) == [
            "mysite_about_001.jpeg",
            "mysite_home_001.png",
            "mysite_home_002.webp",
            "mysite_home_003.gif",
        ]

    def test_prefix_defaults_to_source_name(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        _asset(path1, "p", "x.png")
        report = exporter.export(path1, tmpdir / "out")
        assert report.done[0].dst.name == "mysite_p_001.png"

    def test_filters_and_skips(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        _asset(path1, "page", "keep.PNG")
        _asset(path1, "page", "notes.txt")
        _asset(path1, "page", "noext")
        nested = path1 / "page" / "assets" / "nested"
        nested.mkdir()
        (nested / "deep.png").write_bytes(b"x")
        deeper = path1 / "page" / "other" / "assets"
        deeper.mkdir(parents=True)
        (deeper / "far.png").write_bytes(b"x")
        (path1 / "no_assets").mkdir()
        (path1 / "assets_is_file").mkdir()
        (path1 / "assets_is_file" / "assets").write_text("not a dir", encoding="utf-8")

        out = tmpdir / "out"
        report = exporter.export(path1, out)
        # 扩展名统一小写
        assert _names(out) == ["mysite_page_001.png"]
        assert report.count_failed == 0
        skipped = sorted(p.name for p, _ in report.skipped)
        assert skipped == ["assets_is_file", "no_assets"]

    def test_no_subdirectories_is_warning(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        (path1 / "loose.png").write_bytes(b"x")
        report = exporter.export(path1, tmpdir / "out")
        assert report.planned == []
        assert len(report.warnings) == 1

    def test_dry_run_creates_nothing(self, tmpdir: Path, path1: Path):
        _asset(path1, "page", "a.png")
        out = tmpdir / "out"
        dry = WxExporter(dry_run=True).export(path1, out, prefix="s")
        assert not out.exists()
        assert [dst.name for _, dst in dry.pairs()] == ["s_page_001.png"]

        real = WxExporter().export(path1, out, prefix="s")
        assert dry.pairs() == real.pairs()

    def test_overwrites_existing_output(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        _asset(path1, "page", "a.png", b"fresh")
        out = tmpdir / "out"
        out.mkdir()
        (out / "mysite_page_001.png").write_bytes(b"stale")
        exporter.export(path1, out)
        assert (out / "mysite_page_001.png").read_bytes() == b"fresh"

    def test_repeated_calls_do_not_share_counters(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        _asset(path1, "page", "a.png")
        first = exporter.export(path1, tmpdir / "out1")
        second = exporter.export(path1, tmpdir / "out2")
        assert first.done[0].dst.name == second.done[0].dst.name == "mysite_page_001.png"

    def test_copy_failure_continues(self, exporter: WxExporter, tmpdir: Path, path1: Path):
        _asset(path1, "page", "a.png")
        _asset(path1, "page", "b.png")
        real_copy = exporter.handler.copy_file

        def flaky(src, dst):
            if Path(src).name == "a.png":
                raise OSError("disk full")
            return real_copy(src, dst)

        out = tmpdir / "out"
        with patch.object(exporter.handler, "copy_file", side_effect=flaky):
            report = exporter.export(path1, out)
        assert _names(out) == ["mysite_page_002.png"]
        assert report.count_failed == 1
        assert report.count_done == 1

    def test_missing_source_creates_no_output(self, exporter: WxExporter, tmpdir: Path):
        out = tmpdir / "out"
        with pytest.raises(RootAccessError):
            exporter.export(tmpdir / "missing", out)
        assert not out.exists()

    def test_source_defaults_to_cwd(self, tmpdir: Path, path1: Path, monkeypatch):
        _asset(path1, "page", "a.png")
        monkeypatch.chdir(path1)
        out = tmpdir / "out"
        WxExporter().export(None, out)
        assert _names(out) == ["mysite_page_001.png"]
