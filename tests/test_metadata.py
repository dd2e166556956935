import wave

import pytest
from mutagen.id3 import TCON, TDRC, TIT2, TMOO, TPE1, TRCK, USLT
from mutagen.wave import WAVE

from music_insight.errors import ExtractionError
from music_insight.metadata import lyric_blocks, read_track, split_values, tags_to_fields


class FakeFrame:
    def __init__(self, *text):
        self.text = list(text)


class FakeID3(dict):
    def getall(self, key):
        return [value for name, value in self.items() if name.split(":")[0] == key]


def write_wav(path, seconds=1, rate=8000):
    with wave.open(str(path), "wb") as out:
        out.setnchannels(1)
        out.setsampwidth(2)
        out.setframerate(rate)
        out.writeframes(b"\x00\x00" * rate * seconds)
    return path


class TestTagsToFields:
    def test_vorbis_style_tags(self):
        fields = tags_to_fields(
            {
                "title": ["Basket Case"],
                "artist": ["Green Day"],
                "album": ["Dookie"],
                "genre": ["Punk;Rock"],
                "mood": ["energetic, warm"],
                "date": ["1994-02-01"],
                "tracknumber": ["7/15"],
                "composer": ["Billie Joe Armstrong, Mike Dirnt"],
                "lyrics": ["Do you have the time\n\nTo listen to me whine"],
            }
        )
        assert fields["title"] == "Basket Case"
        assert fields["genres"] == ("Punk", "Rock")
        assert fields["moods"] == ("energetic", "warm")
        assert fields["recording_date"] == "1994-02-01"
        assert fields["track_number"] == "7"
        assert fields["track_total"] == "15"
        assert fields["composers"] == ("Billie Joe Armstrong", "Mike Dirnt")
        assert fields["lyrics"] == ("Do you have the time", "To listen to me whine")

    def test_multiple_genre_values(self):
        fields = tags_to_fields({"genre": ["Synth", "Pop;Wave"]})
        assert fields["genres"] == ("Synth", "Pop", "Wave")

    def test_missing_tags_are_empty(self):
        fields = tags_to_fields({})
        assert fields["artist"] == ""
        assert fields["genres"] == ()
        assert fields["lyrics"] == ()

    def test_id3_frames(self):
        tags = FakeID3(
            {
                "TPE1": FakeFrame("Daft Punk"),
                "TCON": FakeFrame("House"),
                "USLT::eng": FakeFrame("One more time\nWe're gonna celebrate"),
            }
        )
        tags["USLT::eng"].text = "One more time\nWe're gonna celebrate"
        fields = tags_to_fields(tags)
        assert fields["artist"] == "Daft Punk"
        assert fields["genres"] == ("House",)
        assert fields["lyrics"] == ("One more time", "We're gonna celebrate")

    def test_mp4_atoms(self):
        fields = tags_to_fields(
            {
                "©ART": ["Air"],
                "trkn": [(4, 10)],
                "----:com.apple.iTunes:MOOD": [b"chill"],
            }
        )
        assert fields["artist"] == "Air"
        assert fields["track_number"] == "4"
        assert fields["moods"] == ("chill",)


class TestHelpers:
    def test_split_values_drops_blanks(self):
        assert split_values(["a, ,b", ""], ",") == ("a", "b")

    def test_lyric_blocks(self):
        assert lyric_blocks("  one \n\n two\n") == ("one", "two")


class TestReadTrack:
    def test_reads_tagged_wav(self, tmp_path):
        path = write_wav(tmp_path / "01-song.wav", seconds=2)
        audio = WAVE(path)
        audio.add_tags()
        audio.tags.add(TIT2(encoding=3, text=["Song"]))
        audio.tags.add(TPE1(encoding=3, text=["Artist"]))
        audio.tags.add(TCON(encoding=3, text=["Synth;Wave"]))
        audio.tags.add(TMOO(encoding=3, text=["dark"]))
        audio.tags.add(TDRC(encoding=3, text=["1987-03-01"]))
        audio.tags.add(TRCK(encoding=3, text=["1/9"]))
        audio.tags.add(USLT(encoding=3, lang="eng", desc="", text="first line\nsecond line"))
        audio.save()

        track = read_track(path)

        assert track.path == str(path)
        assert track.title == "Song"
        assert track.artist == "Artist"
        assert track.genres == ("Synth", "Wave")
        assert track.moods == ("dark",)
        assert track.recording_date == "1987-03-01"
        assert track.track_number == "1"
        assert track.track_total == "9"
        assert track.lyrics == ("first line", "second line")
        assert track.duration == 2

    def test_untagged_file(self, tmp_path):
        path = write_wav(tmp_path / "untagged.wav")
        with pytest.raises(ExtractionError, match="no tags"):
            read_track(path)

    def test_not_audio(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(ExtractionError):
            read_track(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExtractionError):
            read_track(tmp_path / "missing.flac")
