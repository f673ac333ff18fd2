# Unit tests for buildos.pattern.
# These tests validate wildcard translation, root selection and mode decoding.

from __future__ import annotations

import os

import pytest

from buildos.errors import InvalidMatchMode
from buildos.models import MatchMode
from buildos.pattern import (
    compile_pattern,
    decode_mode,
    normalize_path,
    root_directory,
    split_excludes,
    translate,
)

SEP = os.sep


def test_literal_path_roots_at_its_directory_without_recursion() -> None:
    compiled = compile_pattern("src/test.c")
    assert compiled.rootdir == os.path.join("src")
    assert compiled.recurse is False

    compiled = compile_pattern("main.c")
    assert compiled.rootdir == "."
    assert compiled.recurse is False


def test_recursion_flag_follows_double_star() -> None:
    assert compile_pattern("src/**.c").recurse is True
    assert compile_pattern("src/**/*.h").recurse is True
    assert compile_pattern("src/*.c").recurse is False
    assert compile_pattern("src/*/*.c").recurse is False


def test_root_stops_before_first_wildcard() -> None:
    assert root_directory(os.path.join("src", "lib*", "x", "*.c")) == "src"
    assert root_directory(os.path.join("src", "sub", "*.c")) == os.path.join("src", "sub")
    assert root_directory("*.c") == "."
    assert root_directory("src*") == "."


def test_normalize_path_accepts_both_separators_and_collapses() -> None:
    assert normalize_path("src//sub\\*.c") == SEP.join(["src", "sub", "*.c"])
    assert normalize_path("./src/./a.c") == SEP.join(["src", "a.c"])
    assert normalize_path("") == ""


def test_translate_claims_double_star_before_single_star() -> None:
    seg = "[^%s]*" % ("\\\\" if SEP == "\\" else SEP)
    assert translate("**") == ".*"
    assert translate("*") == seg
    assert translate("a**b*") == "a.*b" + seg


def test_single_star_stays_within_one_segment() -> None:
    regex = compile_pattern("src/*.c").regex
    assert regex.fullmatch(os.path.join("src", "a.c"))
    assert not regex.fullmatch(os.path.join("src", "sub", "a.c"))


def test_double_star_crosses_segments() -> None:
    regex = compile_pattern("src/**.c").regex
    assert regex.fullmatch(os.path.join("src", "a.c"))
    assert regex.fullmatch(os.path.join("src", "sub", "deep", "a.c"))
    assert not regex.fullmatch(os.path.join("src", "a.h"))


def test_regex_metacharacters_are_matched_literally() -> None:
    regex = compile_pattern("lib/a+b(1)-$^%.*").regex
    assert regex.fullmatch(os.path.join("lib", "a+b(1)-$^%.txt"))
    assert not regex.fullmatch(os.path.join("lib", "aab1)-$^%.txt"))
    assert not regex.fullmatch(os.path.join("lib", "a+b(1)-$^%xtxt"))


def test_current_directory_patterns_are_anchored() -> None:
    regex = compile_pattern("*.c").regex
    assert regex.fullmatch("." + SEP + "a.c")
    assert not regex.fullmatch("a.c")
    assert not regex.fullmatch(SEP + "abs" + SEP + "a.c")


def test_split_excludes_drops_empty_entries() -> None:
    assert split_excludes("src/*.c") == ("src/*.c", [])
    assert split_excludes("src/*.c|a.c||b*.c|") == ("src/*.c", ["a.c", "b*.c"])


def test_excludes_are_compiled_like_the_main_pattern() -> None:
    compiled = compile_pattern("src/**.c|test/*.c|*_gen.c")
    assert compiled.spec == os.path.join("src", "**.c")
    assert len(compiled.excludes) == 2
    assert compiled.excludes[0].fullmatch(os.path.join("test", "x.c"))
    assert not compiled.excludes[0].fullmatch(os.path.join("test", "sub", "x.c"))
    assert compiled.excludes[1].fullmatch("parser_gen.c")


def test_walk_depth_counts_segments_below_root() -> None:
    assert compile_pattern("*.c").depth == 1
    assert compile_pattern("src/*.c").depth == 1
    assert compile_pattern("src/*/x.c").depth == 2
    assert compile_pattern("src/**.c").depth is None


@pytest.mark.parametrize(
    "token, expected",
    [
        ("a", MatchMode.ANY),
        ("f", MatchMode.FILES),
        ("d", MatchMode.DIRS),
        (None, MatchMode.FILES),
        (False, MatchMode.FILES),
        (True, MatchMode.DIRS),
        (1, MatchMode.DIRS),
        (MatchMode.ANY, MatchMode.ANY),
    ],
)
def test_decode_mode(token, expected) -> None:
    assert decode_mode(token) is expected


def test_decode_mode_rejects_unknown_tokens() -> None:
    with pytest.raises(InvalidMatchMode):
        decode_mode("x")
    with pytest.raises(ValueError):
        decode_mode("files")


def test_control_characters_in_spec_are_not_wildcards() -> None:
    regex = compile_pattern("a\x01b*").regex
    assert regex.fullmatch("." + SEP + "a\x01bz")
    assert not regex.fullmatch("." + SEP + "aXYbz")
    assert not regex.fullmatch("." + SEP + "a" + SEP + "bz")

    regex = compile_pattern("a\x02b").regex
    assert regex.fullmatch("." + SEP + "a\x02b")
    assert not regex.fullmatch("." + SEP + "aXb")
