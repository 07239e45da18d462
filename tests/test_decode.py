"""Tests for strict config decoding."""

from __future__ import annotations

import dataclasses
from typing import Optional

import pytest

from remote_state._decode import decode, decoded_keys
from remote_state._errors import DecodeError


@dataclasses.dataclass(frozen=True)
class Sample:
    name: str = ""
    enabled: bool = False
    count: int = 0
    ratio: float = 0.0
    labels: dict[str, str] = dataclasses.field(default_factory=dict)
    zones: list = dataclasses.field(default_factory=list)
    renamed: str = dataclasses.field(default="", metadata={"key": "source_key"})
    hidden: object = dataclasses.field(default=None, metadata={"decode": False})
    note: Optional[str] = None


class TestDecode:
    def test_known_fields(self) -> None:
        s = decode(Sample, {"name": "a", "enabled": True, "count": 3, "ratio": 2, "labels": {"k": "v"}})
        assert s == Sample(name="a", enabled=True, count=3, ratio=2.0, labels={"k": "v"})

    def test_unknown_keys_ignored(self) -> None:
        assert decode(Sample, {"name": "a", "something_new": 1}) == Sample(name="a")

    def test_missing_and_none_keep_defaults(self) -> None:
        assert decode(Sample, {"name": None}) == Sample()

    def test_metadata_key(self) -> None:
        assert decode(Sample, {"source_key": "x", "renamed": "ignored"}).renamed == "x"

    def test_non_decoded_field_untouched(self) -> None:
        assert decode(Sample, {"hidden": "x"}).hidden is None

    def test_optional_field(self) -> None:
        assert decode(Sample, {"note": "hi"}).note == "hi"

    def test_list_field(self) -> None:
        assert decode(Sample, {"zones": ("a", "b")}).zones == ["a", "b"]

    def test_mapping_is_copied(self) -> None:
        labels = {"k": "v"}
        s = decode(Sample, {"labels": labels})
        labels["k"] = "changed"
        assert s.labels == {"k": "v"}


class TestDecodeErrors:
    @pytest.mark.parametrize(
        ("key", "value", "expected"),
        [
            ("enabled", "true", "bool"),
            ("name", 5, "str"),
            ("count", True, "int"),
            ("count", "3", "int"),
            ("ratio", False, "float"),
            ("labels", "env=prod", "mapping"),
            ("labels", {"env": 1}, "mapping of str to str"),
            ("zones", "a", "list"),
            ("note", 1, "str"),
        ],
    )
    def test_wrong_shape(self, key: str, value: object, expected: str) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode(Sample, {key: value}, backend="fake")
        assert exc_info.value.field == key
        assert exc_info.value.expected == expected
        assert exc_info.value.backend == "fake"

    def test_error_uses_source_key(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode(Sample, {"source_key": 1})
        assert exc_info.value.field == "source_key"


class TestDecodedKeys:
    def test_keys_in_field_order(self) -> None:
        assert decoded_keys(Sample) == (
            "name",
            "enabled",
            "count",
            "ratio",
            "labels",
            "zones",
            "source_key",
            "note",
        )
