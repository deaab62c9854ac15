from __future__ import annotations

from typing import Any

import pytest

from jsonapi_core.core.querystring import decode, encode, split_key


class TestSplitKey:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("a", ["a"]),
            ("a[b][c]", ["a", "b", "c"]),
            ("a[]", ["a", ""]),
            ("a[b", ["a[b"]),
            ("[b]", ["[b]"]),
        ],
    )
    def test_split(self, key: str, expected: list[str]) -> None:
        assert split_key(key) == expected

    def test_segments_beyond_depth_stay_literal(self) -> None:
        assert split_key("a[b][c][d]", max_depth=2) == ["a", "b", "c", "[d]"]


class TestDecode:
    def test_repeated_keys_collect_into_a_list(self) -> None:
        assert decode("a=1&a=2") == {"a": ["1", "2"]}

    def test_empty_brackets_append(self) -> None:
        assert decode("a[]=x&a[]=y") == {"a": ["x", "y"]}

    def test_indices_build_ordered_compact_lists(self) -> None:
        assert decode("a[1]=y&a[0]=x") == {"a": ["x", "y"]}
        assert decode("a[5]=x") == {"a": ["x"]}

    def test_nested_mapping_with_list(self) -> None:
        assert decode("a[x][0]=1&a[x][1]=2&a[y]=3") == {"a": {"x": ["1", "2"], "y": "3"}}

    def test_nested_structure_replaces_earlier_scalar(self) -> None:
        assert decode("a=1&a[b]=2") == {"a": {"b": "2"}}
        assert decode("a[b]=2&a=1") == {"a": {"b": "2"}}

    def test_parameter_limit(self) -> None:
        assert decode("a=1&b=2&c=3", parameter_limit=2) == {"a": "1", "b": "2"}

    def test_empty_keys_are_skipped(self) -> None:
        assert decode("=x&a=1") == {"a": "1"}

    def test_blank_values_are_kept(self) -> None:
        assert decode("a=&b") == {"a": "", "b": ""}

    def test_percent_escapes_and_plus(self) -> None:
        assert decode("q=a%20b+c%26d") == {"q": "a b c&d"}


class TestEncode:
    def test_reserved_vocabulary_is_not_escaped(self) -> None:
        assert encode({"page": {"offset": 20, "limit": 10}}) == "page[offset]=20&page[limit]=10"
        assert encode({"include": "author,comments.author"}) == "include=author,comments.author"

    def test_special_characters_are_escaped(self) -> None:
        assert encode({"filter": {"title": "a b&c=d"}}) == "filter[title]=a%20b%26c%3Dd"

    def test_lists_none_and_booleans(self) -> None:
        assert encode({"a": ["x", "y"], "b": None, "c": True}) == "a[0]=x&a[1]=y&c=true"

    def test_depth_capped_tail_is_not_bracketed_again(self) -> None:
        raw = "a[b][c][d]=1&a[b][c][d]=2"
        decoded = decode(raw, max_depth=1)
        assert decoded == {"a": {"b": {"[c][d]": ["1", "2"]}}}
        assert encode(decoded) == raw

    def test_repeated_unsplit_key_repeats(self) -> None:
        assert encode({"a[b]c": ["1", "2"]}) == "a[b]c=1&a[b]c=2"
        assert decode(encode({"a[b]c": ["1", "2"]})) == {"a[b]c": ["1", "2"]}

    def test_decode_inverts_encode(self) -> None:
        data: dict[str, Any] = {
            "filter": {"author": {"name": "john doe"}, "tags": ["a", "b"]},
            "single": ["only"],
            "plain": "x,y",
        }
        assert decode(encode(data)) == data
