import pytest

from aer.payload import ArtifactKind, classify_artifact, has_content, normalize, to_json


def test_normalize_empty_and_text():
    assert normalize(None) == {"content": ""}
    assert normalize("x") == {"content": "x"}
    assert normalize("") == {"content": ""}


def test_normalize_sequence_is_compact_json():
    assert normalize([1, 2]) == {"content": "[1,2]"}
    assert normalize(("a", {"b": 1})) == {"content": '["a",{"b":1}]'}


def test_normalize_content_field_names():
    assert normalize({"text": "hi"}) == {"content": "hi"}
    assert normalize({"message": "m"}) == {"content": "m"}
    assert normalize({"html": "<p>x</p>"}) == {"content": "<p>x</p>"}


def test_normalize_content_field_priority():
    # text wins over body even when body comes first in the record
    assert normalize({"body": "b", "text": "t"}) == {"content": "t"}


def test_normalize_non_string_content_field_is_serialized():
    assert normalize({"data": {"k": [1, 2]}}) == {"content": '{"k":[1,2]}'}
    assert normalize({"value": None}) == {"content": "null"}


def test_normalize_unknown_record_is_serialized():
    assert normalize({"foo": "bar"}) == {"content": '{"foo":"bar"}'}


def test_normalize_keeps_existing_payload_and_metadata():
    record = {"content": "a", "metadata": {"m": 1}}
    assert normalize(record) == {"content": "a", "metadata": {"m": 1}}


def test_normalize_does_not_mutate_artifact():
    record = {"plaintext": "p", "extra": 1}
    result = normalize(record)
    result["plaintext"] = "changed"
    assert record == {"plaintext": "p", "extra": 1}


def test_normalize_maps_encrypted():
    blob = {"ciphertext": "abc", "nonce": "n"}
    result = normalize({"encrypted": blob, "title": "T", "ignored": 1})
    assert result == {"encryptedContent": blob, "title": "T"}


def test_normalize_passthrough_on_field_mapping():
    result = normalize({
        "text": "hello",
        "url": "https://example.com",
        "tags": ["a"],
        "summaryOnly": True,
        "timestamp": 5,
        "other": "dropped",
    })
    assert result == {
        "content": "hello",
        "url": "https://example.com",
        "tags": ["a"],
        "summaryOnly": True,
        "timestamp": 5,
    }


def test_normalize_passthrough_on_serialized_record():
    result = normalize({"foo": 1, "fileName": "a.txt"})
    assert result["fileName"] == "a.txt"
    assert result["content"] == '{"foo":1,"fileName":"a.txt"}'


def test_normalize_empty_content_falls_through():
    # An empty content string is not a payload; the record is serialized
    result = normalize({"content": ""})
    assert result == {"content": '{"content":""}'}


@pytest.mark.parametrize("value, expected", [
    (42, "42"),
    (1.5, "1.5"),
    (1.0, "1"),
    (float("nan"), "NaN"),
    (float("-inf"), "-Infinity"),
    (True, "true"),
    (False, "false"),
])
def test_normalize_scalars(value, expected):
    assert normalize(value) == {"content": expected}


def test_classify_artifact():
    assert classify_artifact(None) is ArtifactKind.EMPTY
    assert classify_artifact("s") is ArtifactKind.TEXT
    assert classify_artifact([1]) is ArtifactKind.SEQUENCE
    assert classify_artifact({}) is ArtifactKind.RECORD
    assert classify_artifact(3) is ArtifactKind.SCALAR


def test_has_content():
    assert has_content({"content": "x"})
    assert has_content({"encryptedContent": {"ciphertext": "c", "nonce": "n"}})
    assert not has_content({"content": ""})
    assert not has_content({"metadata": {}})


def test_to_json_writes_valid_json_for_floats():
    assert to_json([float("nan"), 2.0, 0.25, float("inf")]) == "[null,2,0.25,null]"
    assert normalize({"value": {"n": float("nan")}}) == {"content": '{"n":null}'}
