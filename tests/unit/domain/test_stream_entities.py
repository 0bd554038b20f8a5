"""Tests for stream domain entities."""

from __future__ import annotations

import dataclasses

import pytest

from vegalink.domain.entities.streams import (
    MetaGuess,
    StreamCandidate,
    SubtitleRef,
)


class TestMetaGuess:
    def test_defaults(self) -> None:
        meta = MetaGuess()
        assert (meta.size, meta.quality, meta.language) == ("", "", "Multi")

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            MetaGuess().size = "1 GB"  # type: ignore[misc]


class TestStreamCandidate:
    def test_placeholder_is_not_usable(self) -> None:
        placeholder = StreamCandidate.placeholder()
        assert placeholder == StreamCandidate()
        assert not placeholder.is_usable

    def test_usable_with_link(self, candidate: StreamCandidate) -> None:
        assert candidate.is_usable

    def test_from_mapping_camel_case(self) -> None:
        candidate = StreamCandidate.from_mapping(
            {
                "server": "GDrive",
                "link": "https://x/1",
                "quality": "1080",
                "type": "MKV",
                "fileName": "Movie.mkv",
                "providerName": "Vega",
                "providerValue": "vega",
                "headers": {"Referer": "https://ref/"},
                "subtitles": [{"uri": "https://s/a.srt", "lang": "eng"}, "junk"],
            }
        )

        assert candidate.type == "mkv"
        assert candidate.file_name == "Movie.mkv"
        assert candidate.provider_name == "Vega"
        assert candidate.provider_value == "vega"
        assert candidate.headers == {"Referer": "https://ref/"}
        assert candidate.subtitles == (SubtitleRef(uri="https://s/a.srt", lang="eng"),)

    def test_from_mapping_snake_case_and_unknown_type(self) -> None:
        candidate = StreamCandidate.from_mapping(
            {"link": "https://x/1", "type": "avi", "provider_name": "P", "headers": "bad"}
        )

        assert candidate.type == ""
        assert candidate.provider_name == "P"
        assert candidate.headers is None

    def test_from_mapping_missing_fields(self) -> None:
        candidate = StreamCandidate.from_mapping({"quality": None})

        assert candidate == StreamCandidate()

    @pytest.mark.parametrize("subtitles", [5, "https://x/sub.srt", {"url": "u"}])
    def test_from_mapping_ignores_malformed_subtitles(self, subtitles: object) -> None:
        candidate = StreamCandidate.from_mapping(
            {"link": "https://x/1", "subtitles": subtitles}
        )

        assert candidate.subtitles == ()
