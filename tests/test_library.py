import dataclasses
import threading
from pathlib import Path

import pytest
from PIL import Image

from music_insight.config import Config
from music_insight.errors import ExtractionError
from music_insight.library import load_albums, load_covers, load_songs
from music_insight.models import Track


class FakeExtractor:
    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, path: Path) -> Track:
        with self._lock:
            self.calls.append(path.name)
        if path.name.startswith("99-"):
            raise ExtractionError(path, "no tags found")
        return Track(
            path=str(path),
            title=path.stem,
            artist=path.parent.parent.name,
            album=path.parent.name,
            genres=("Rock",),
            recording_date="2001-05-04",
            duration=100,
        )


def touch(path: Path, data: bytes = b"") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def config(tmp_path):
    music = tmp_path / "music"
    touch(music / "Artist" / "First" / "01-a.flac")
    touch(music / "Artist" / "First" / "02-b.flac")
    touch(music / "Artist" / "Second" / "01-c.mp3")
    touch(music / "Artist" / "Second" / "99-broken.mp3")
    Image.new("RGB", (16, 16), (200, 30, 30)).save(music / "Artist" / "First" / "cover.png")
    return Config(
        music_dir=music,
        cache_dir=tmp_path / "cache",
        collage_dir=tmp_path / "collages",
        workers=2,
        cover_size=8,
        palette_size=3,
        palette_iterations=2,
    )


class TestLoadSongs:
    def test_cold_then_warm(self, config):
        extract = FakeExtractor()
        cold = load_songs(config, extract)

        assert sorted(Path(t.path).name for t in cold.records) == ["01-a.flac", "01-c.mp3", "02-b.flac"]
        assert cold.extracted == 3
        assert len(cold.warnings) == 1
        assert config.songs_cache_path.exists()

        warm_extract = FakeExtractor()
        warm = load_songs(config, warm_extract)
        # failed files are not cached, so they are retried
        assert warm_extract.calls == ["99-broken.mp3"]
        assert warm.records == cold.records

    def test_strict_mode(self, config):
        strict = dataclasses.replace(config, strict=True)
        with pytest.raises(ExtractionError):
            load_songs(strict, FakeExtractor())

    def test_cache_write_failure_keeps_results(self, config):
        touch(config.cache_dir)
        result = load_songs(config, FakeExtractor())
        assert len(result.records) == 3
        assert result.cache_error is not None


class TestLoadAlbums:
    def test_first_tracks_only(self, config):
        result = load_albums(config, FakeExtractor())
        assert sorted(Path(t.path).name for t in result.records) == ["01-a.flac", "01-c.mp3"]


class TestLoadCovers:
    def test_cover_is_paired_with_album(self, config):
        result = load_covers(config, FakeExtractor())

        assert len(result.records) == 1
        cover = result.records[0]
        assert cover.album.album == "First"
        assert cover.image.width == 8
        assert cover.image.height == 8
        assert len(cover.image.pixels) == 8 * 8 * 3
        assert cover.image.dominant_colors[0] == (200, 30, 30)
        assert config.covers_cache_path.exists()

    def test_warm_run_reuses_covers(self, config):
        first = load_covers(config, FakeExtractor())
        second = load_covers(config, FakeExtractor())
        assert second.extracted == 0
        assert second.records == first.records

    def test_cover_without_album_is_skipped(self, config):
        orphan = config.music_dir / "Other" / "Loose"
        Image.new("RGB", (4, 4)).save(touch(orphan / "cover.png"))
        result = load_covers(config, FakeExtractor())
        assert len(result.records) == 1
        assert any("no album track" in warning for warning in result.warnings)

    def test_corrupt_cover_is_skipped(self, config):
        touch(config.music_dir / "Artist" / "Second" / "cover.jpg", b"not an image")
        result = load_covers(config, FakeExtractor())
        assert [Path(c.path).name for c in result.records] == ["cover.png"]
        assert any("decode" in warning for warning in result.warnings)
