"""Tests for the tagger traversal and its result types."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from tagthem.tagger import (
    ExtractorError,
    ExtractorKind,
    ExtractorResult,
    FieldInfo,
    FloatExtractor,
    IntExtractor,
    StringExtractor,
    Tagger,
    ValueKind,
    classify,
    fields_by_tag,
    is_valid_field_path,
    text_tag_index,
)


# =============================================================================
# Test extractors
# =============================================================================


@dataclass
class KeywordExtractor:
    """Tags strings containing any of the configured words."""

    words: dict[str, str]
    name: str = "keywords"

    def is_valid(self, value: str) -> bool:
        return bool(value)

    def extract_tags(self, value: str) -> tuple[list[str], Any]:
        found = [word for word in self.words if word in value]
        return [self.words[word] for word in found], found


@dataclass
class SignExtractor:
    """Tags numbers as positive or negative."""

    name: str = "sign"
    seen: list = field(default_factory=list)

    def is_valid(self, value) -> bool:
        self.seen.append(value)
        return value != 0

    def extract_tags(self, value) -> tuple[list[str], Any]:
        return (["positive"] if value > 0 else ["negative"]), None


@dataclass
class FailingExtractor:
    name: str = "broken"
    error: Exception = field(default_factory=lambda: RuntimeError("boom"))

    def is_valid(self, value) -> bool:
        return True

    def extract_tags(self, value) -> tuple[list[str], Any]:
        raise self.error


@dataclass
class Address:
    city: str
    zip_code: int


@dataclass
class Customer:
    name: str
    address: Address
    scores: list[float]
    _secret: str = "hidden"


@pytest.fixture
def keywords():
    return KeywordExtractor({"hello": "greeting", "bye": "farewell"})


@pytest.fixture
def sign():
    return SignExtractor()


@pytest.fixture
def tagger(keywords, sign):
    return Tagger(
        string_extractors=[keywords],
        int_extractors=[sign],
        float_extractors=[sign],
    )


def names(fields_info: list[FieldInfo]) -> list[str]:
    return [field_info.name for field_info in fields_info]


# =============================================================================
# Classification and path filtering
# =============================================================================


class TestClassify:
    @pytest.mark.parametrize(
        "value,kind",
        [
            ("text", ValueKind.STRING),
            (3, ValueKind.INTEGER),
            (2.5, ValueKind.FLOAT),
            ({"a": 1}, ValueKind.MAP),
            ([1, 2], ValueKind.LIST),
            ((1, 2), ValueKind.LIST),
            (Address("Oslo", 150), ValueKind.RECORD),
            (True, ValueKind.UNSUPPORTED),
            (None, ValueKind.UNSUPPORTED),
            ({1, 2}, ValueKind.UNSUPPORTED),
            (Address, ValueKind.UNSUPPORTED),
        ],
    )
    def test_classify(self, value, kind):
        assert classify(value) == kind


class TestFieldPathFilter:
    def test_everything_valid_without_filters(self):
        assert is_valid_field_path("a.b") is True
        assert is_valid_field_path("") is True

    def test_include_prefix(self):
        assert is_valid_field_path("B.C", include_paths=["B"]) is True
        assert is_valid_field_path("A", include_paths=["B"]) is False

    def test_exclude_prefix(self):
        assert is_valid_field_path("B.C", exclude_paths=["B"]) is False
        assert is_valid_field_path("A", exclude_paths=["B"]) is True

    def test_exclude_wins_over_include(self):
        assert is_valid_field_path("B.C", include_paths=["B"], exclude_paths=["B.C"]) is False

    def test_prefix_is_textual(self):
        # "B" also covers "Bee": matching is a plain prefix test
        assert is_valid_field_path("Bee", include_paths=["B"]) is True


# =============================================================================
# Traversal
# =============================================================================


class TestTagObject:
    def test_field_paths(self):
        data = {"A": "x", "B": {"C": 1}, "D": ["y", 2.5]}

        fields_info = Tagger().tag_object(data)

        assert names(fields_info) == ["A", "B.C", "D.index(0)", "D.index(1)"]
        assert all(f.extractors == {} for f in fields_info)

    def test_include_paths(self):
        data = {"A": "x", "B": {"C": 1}, "D": ["y", 2.5]}

        fields_info = Tagger().tag_object(data, include_paths=["B"])

        assert names(fields_info) == ["B.C"]

    def test_exclude_paths(self):
        data = {"A": "x", "B": {"C": 1, "E": 2}, "D": ["y"]}

        fields_info = Tagger().tag_object(
            data, include_paths=["B"], exclude_paths=["B.E"]
        )

        assert names(fields_info) == ["B.C"]

    def test_scalar_root(self, tagger):
        fields_info = tagger.tag_object("hello there")

        assert names(fields_info) == [""]
        assert fields_info[0].tags == ["greeting"]

    def test_list_root(self):
        fields_info = Tagger().tag_object(["a", ["b"]])

        assert names(fields_info) == ["index(0)", "index(1).index(0)"]

    def test_routes_values_by_kind(self, tagger, sign):
        data = {"title": "hello", "count": 3, "delta": -1.5}

        fields_info = tagger.tag_object(data)

        assert [f.tags for f in fields_info] == [["greeting"], ["positive"], ["negative"]]
        assert sign.seen == [3, -1.5]

    def test_extractor_results_recorded(self, tagger):
        fields_info = tagger.tag_object({"msg": "hello and bye"})

        result = fields_info[0].extractors["keywords"]
        assert result.tags == ["greeting", "farewell"]
        assert result.run_data == ["hello", "bye"]

    def test_is_valid_gates_extraction(self, tagger):
        fields_info = tagger.tag_object({"zero": 0, "empty": ""})

        assert names(fields_info) == ["zero", "empty"]
        assert fields_info[0].extractors == {}
        assert fields_info[1].extractors == {}

    def test_bool_and_none_are_skipped(self, tagger, sign):
        fields_info = tagger.tag_object({"flag": True, "missing": None, "n": 1})

        assert names(fields_info) == ["n"]
        assert sign.seen == [1]

    def test_non_string_keys_are_skipped(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="tagthem.tagger.tagger"):
            fields_info = Tagger().tag_object({1: "x", "a": "y"})

        assert names(fields_info) == ["a"]
        assert "non-string key" in caplog.text

    def test_dataclass_records(self, tagger):
        customer = Customer(
            name="hello Ann",
            address=Address(city="Oslo", zip_code=150),
            scores=[1.5, -2.0],
        )

        fields_info = tagger.tag_object(customer)

        assert names(fields_info) == [
            "name",
            "address.city",
            "address.zip_code",
            "scores.index(0)",
            "scores.index(1)",
        ]
        assert fields_by_tag(fields_info) == {
            "greeting": ["name"],
            "positive": ["address.zip_code", "scores.index(0)"],
            "negative": ["scores.index(1)"],
        }

    def test_private_record_fields_are_skipped(self):
        customer = Customer("a", Address("b", 1), [])

        assert "_secret" not in names(Tagger().tag_object(customer))

    def test_multiple_extractors_same_kind(self, keywords):
        other = KeywordExtractor({"hello": "hi"}, name="short")
        tagger = Tagger(string_extractors=[keywords, other])

        fields_info = tagger.tag_object({"a": "hello"})

        assert list(fields_info[0].extractors) == ["keywords", "short"]
        assert fields_info[0].tags == ["greeting", "hi"]

    def test_add_extractor(self, keywords):
        tagger = Tagger()
        tagger.add_extractor(keywords, ExtractorKind.STRING)

        assert tagger.extractors(ExtractorKind.STRING) == [keywords]
        assert tagger.extractors(ExtractorKind.INTEGER) == []
        assert tagger.tag_object("hello")[0].tags == ["greeting"]


class TestExtractorFailures:
    def test_failure_is_wrapped(self):
        tagger = Tagger(string_extractors=[FailingExtractor()])

        with pytest.raises(ExtractorError) as exc_info:
            tagger.tag_object({"a": {"b": "x"}})

        assert exc_info.value.extractor == "broken"
        assert exc_info.value.field == "a.b"
        assert "boom" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_extractor_error_propagates_unchanged(self):
        error = ExtractorError("bad input", "custom", "x")
        tagger = Tagger(string_extractors=[FailingExtractor(error=error)])

        with pytest.raises(ExtractorError) as exc_info:
            tagger.tag_object({"a": "x"})

        assert exc_info.value is error

    def test_failure_aborts_traversal(self, sign):
        tagger = Tagger(string_extractors=[FailingExtractor()], int_extractors=[sign])

        with pytest.raises(ExtractorError):
            tagger.tag_object({"first": "x", "second": 5})

        assert sign.seen == []


# =============================================================================
# JSON and text entry points
# =============================================================================


class TestTagJson:
    def test_tag_json(self, tagger):
        document = json.dumps({"user": {"greeting": "hello", "age": 31}})

        fields_info = tagger.tag_json(document)

        assert fields_by_tag(fields_info) == {
            "greeting": ["user.greeting"],
            "positive": ["user.age"],
        }

    def test_tag_json_with_filters(self, tagger):
        document = '{"a": "hello", "b": "hello"}'

        assert names(tagger.tag_json(document, exclude_paths=["a"])) == ["b"]

    def test_invalid_json_raises(self, tagger):
        with pytest.raises(json.JSONDecodeError):
            tagger.tag_json("{not json")


class TestTagText:
    def test_tag_text(self, tagger):
        results = tagger.tag_text("hello, bye")

        assert results == {
            "keywords": ExtractorResult(tags=["greeting", "farewell"], run_data=["hello", "bye"])
        }

    def test_text_tag_index(self, tagger):
        index = text_tag_index(tagger.tag_text("hello, bye"))

        assert index == {"greeting": None, "farewell": None}

    def test_tag_text_failure(self):
        tagger = Tagger(string_extractors=[FailingExtractor()])

        with pytest.raises(ExtractorError) as exc_info:
            tagger.tag_text("x")

        assert exc_info.value.field == ""


# =============================================================================
# Result types
# =============================================================================


class TestResultTypes:
    def test_field_info_tags_are_unique(self):
        info = FieldInfo(
            name="a",
            extractors={
                "one": ExtractorResult(tags=["x", "y"]),
                "two": ExtractorResult(tags=["y", "z"]),
            },
        )

        assert info.tags == ["x", "y", "z"]

    def test_fields_by_tag_lists_field_once_per_tag(self):
        fields_info = [
            FieldInfo("a", {"one": ExtractorResult(["x"]), "two": ExtractorResult(["x"])}),
            FieldInfo("b", {"one": ExtractorResult(["x", "y"])}),
            FieldInfo("c", {}),
        ]

        assert fields_by_tag(fields_info) == {"x": ["a", "b"], "y": ["b"]}

    def test_to_dict(self):
        info = FieldInfo("a.b", {"one": ExtractorResult(["x"], {"x": ["p"]})})

        assert info.to_dict() == {
            "name": "a.b",
            "extractors": {"one": {"tags": ["x"], "runData": {"x": ["p"]}}},
        }

    def test_extractors_satisfy_protocols(self, keywords, sign):
        assert isinstance(keywords, StringExtractor)
        assert isinstance(sign, IntExtractor)
        assert isinstance(sign, FloatExtractor)
