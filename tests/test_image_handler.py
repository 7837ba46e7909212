import json
import shutil
import tempfile
from pathlib import Path

import pytest
from PIL import Image

from rename_py.image_handler import ImageHandler, format_exif, gps_coordinates


def _jpeg_with_exif(path: Path, make: str = "TestMaker", model: str = "Model X") -> Path:
    exif = Image.Exif()
    exif[0x010F] = make
    exif[0x0110] = model
    Image.new("RGB", (32, 24), color=(255, 0, 0)).save(path, format="JPEG", exif=exif)
    return path


class TestImageHandler:
    @pytest.fixture
    def ih(self):
        return ImageHandler()

    @pytest.fixture
    def tmpdir(self):
        d = Path(tempfile.mkdtemp())
        yield d
        shutil.rmtree(d)

    def test_read_exif(self, ih: ImageHandler, tmpdir: Path):
        p = _jpeg_with_exif(tmpdir / "photo.jpg")
        tags = ih.read_exif(p)
        assert tags["Make"] == "TestMaker"
        assert tags["Model"] == "Model X"
        assert "GPS_Latitude" not in tags

    def test_missing_file(self, ih: ImageHandler, tmpdir: Path):
        with pytest.raises(FileNotFoundError):
            ih.read_exif(tmpdir / "nope.jpg")

    def test_unsupported_extension_rejected_before_decoding(self, ih: ImageHandler, tmpdir: Path):
        p = tmpdir / "image.png"
        Image.new("RGB", (8, 8)).save(p)
        with pytest.raises(ValueError):
            ih.read_exif(p)
        txt = tmpdir / "test.txt"
        txt.write_text("", encoding="utf-8")
        with pytest.raises(ValueError):
            ih.read_exif(txt)

    def test_image_without_exif(self, ih: ImageHandler, tmpdir: Path):
        p = tmpdir / "plain.jpg"
        Image.new("RGB", (8, 8)).save(p, format="JPEG")
        with pytest.raises(ValueError):
            ih.read_exif(p)

    def test_read_exif_dir(self, ih: ImageHandler, tmpdir: Path):
        _jpeg_with_exif(tmpdir / "a.jpg", make="A")
        (tmpdir / "broken.jpeg").write_text("not an image", encoding="utf-8")
        (tmpdir / "skip.txt").write_text("x", encoding="utf-8")
        sub = tmpdir / "sub"
        sub.mkdir()
        _jpeg_with_exif(sub / "b.jpg", make="B")

        flat = ih.read_exif_dir(tmpdir)
        assert [p.name for p, _ in flat] == ["a.jpg", "broken.jpeg"]
        assert flat[0][1]["Make"] == "A"
        assert isinstance(flat[1][1], str)

        deep = ih.read_exif_dir(tmpdir, recursive=True)
        assert [p.name for p, _ in deep] == ["a.jpg", "broken.jpeg", "b.jpg"]

    def test_read_exif_dir_missing(self, ih: ImageHandler, tmpdir: Path):
        with pytest.raises(FileNotFoundError):
            ih.read_exif_dir(tmpdir / "nonexistent")

    def test_gps_coordinates(self):
        gps = {1: "S", 2: (33.0, 51.0, 36.0), 3: "E", 4: (151.0, 12.0, 0.0)}
        lat, lon = gps_coordinates(gps)
        assert lat == pytest.approx(-33.86)
        assert lon == pytest.approx(151.2)
        assert gps_coordinates({}) is None

    def test_format_exif(self):
        tags = {"Make": "Canon", "GPS_Latitude": 1.5, "GPS_Longitude": -2.25}
        text = format_exif(tags, "text")
        assert text.splitlines()[0] == "%-30s: %s" % ("Make", "Canon")
        assert "GPS Coordinates" in text
        assert json.loads(format_exif(tags, "json"))["Make"] == "Canon"
        with pytest.raises(ValueError):
            format_exif(tags, "xml")
