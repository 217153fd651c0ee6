"""
Tests for MetadataResolverImpl: embedded date, fallbacks and timeout.
"""
import os
import threading
from datetime import datetime

from chronofile.core.hasher import HasherImpl
from chronofile.core.metadata import MetadataResolverImpl, filesystem_birth_time
from conftest import FakeDateSource


class SlowDateSource:
    """Blocks until released, simulating a hung metadata reader."""

    def __init__(self):
        self.release = threading.Event()

    def read(self, path):
        self.release.wait(5)
        return "1999-01-01T00:00:00"


class FailingDateSource:
    def read(self, path):
        raise RuntimeError("corrupt EXIF block")


class TestFilesystemBirthTime:
    def test_returns_iso_timestamp(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_text("x")
        value = filesystem_birth_time(str(f))
        assert datetime.fromisoformat(value)

    def test_not_newer_than_mtime(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_text("x")
        os.utime(f, (1_000_000_000, 1_000_000_000))
        value = datetime.fromisoformat(filesystem_birth_time(str(f)))
        st = os.stat(f)
        birth = getattr(st, "st_birthtime", None)
        expected = birth if birth is not None else min(st.st_ctime, st.st_mtime)
        assert value == datetime.fromtimestamp(expected)

    def test_missing_file_returns_none(self, tmp_path):
        assert filesystem_birth_time(str(tmp_path / "missing")) is None


class TestMetadataResolver:
    def test_embedded_date_is_used(self, tmp_path):
        f = tmp_path / "a.jpg"
        f.write_bytes(b"content")
        with MetadataResolverImpl(date_source=FakeDateSource({"a.jpg": "2018-02-03T04:05:06"})) as resolver:
            checksum, date = resolver.resolve(str(f))

        assert checksum == HasherImpl().compute_checksum(str(f))
        assert date == "2018-02-03T04:05:06"

    def test_missing_embedded_date_falls_back_to_birth_time(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_bytes(b"content")
        with MetadataResolverImpl(date_source=FakeDateSource()) as resolver:
            _, date = resolver.resolve(str(f))
        assert date == filesystem_birth_time(str(f))

    def test_failing_source_falls_back_to_birth_time(self, tmp_path):
        f = tmp_path / "a.jpg"
        f.write_bytes(b"content")
        with MetadataResolverImpl(date_source=FailingDateSource()) as resolver:
            checksum, date = resolver.resolve(str(f))
        assert checksum is not None
        assert date == filesystem_birth_time(str(f))

    def test_timeout_falls_back_to_birth_time(self, tmp_path):
        f = tmp_path / "a.jpg"
        f.write_bytes(b"content")
        source = SlowDateSource()
        resolver = MetadataResolverImpl(date_source=source, timeout=0.1)
        try:
            _, date = resolver.resolve(str(f))
        finally:
            source.release.set()
            resolver.close()
        assert date == filesystem_birth_time(str(f))

    def test_filesystem_date_mode_skips_date_source(self, tmp_path):
        f = tmp_path / "a.jpg"
        f.write_bytes(b"content")
        source = FakeDateSource({"a.jpg": "2018-02-03T04:05:06"})
        with MetadataResolverImpl(date_source=source, use_filesystem_date=True) as resolver:
            _, date = resolver.resolve(str(f))
        assert source.calls == []
        assert date == filesystem_birth_time(str(f))

    def test_unreadable_file_has_no_checksum(self, tmp_path):
        with MetadataResolverImpl(date_source=FakeDateSource(), use_filesystem_date=True) as resolver:
            checksum, date = resolver.resolve(str(tmp_path / "missing.jpg"))
        assert checksum is None
        assert date is None
