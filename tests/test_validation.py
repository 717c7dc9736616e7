"""Name and path rules."""

import pytest

from webide.core.errors import InvalidName
from webide.store.validation import (
    detect_language,
    join_path,
    normalize_path,
    validate_name,
)


@pytest.mark.parametrize("name", ["App.jsx", "src", ".env", "my file.txt", "ünïcode.md"])
def test_valid_names_pass(name):
    assert validate_name(name) == name


@pytest.mark.parametrize(
    "name",
    ["", None, "a/b", "a\\b", "a:b", 'a"b', "a<b", "a>b", "a|b", "a?b", "a*b", "tab\tname", "nul\x00", ".", ".."],
)
def test_invalid_names_rejected(name):
    with pytest.raises(InvalidName):
        validate_name(name)


def test_surrounding_whitespace_rejected():
    with pytest.raises(InvalidName):
        validate_name(" padded ")


def test_overlong_name_rejected():
    with pytest.raises(InvalidName):
        validate_name("x" * 256)


def test_join_path():
    assert join_path(None, "src") == "src"
    assert join_path("", "src") == "src"
    assert join_path("src/lib", "util.js") == "src/lib/util.js"


def test_join_path_enforces_length():
    with pytest.raises(InvalidName):
        join_path("a" * 1000, "b" * 30)


@pytest.mark.parametrize(
    "raw, expected",
    [("/src/App.jsx", "src/App.jsx"), ("src/", "src"), ("/a/", "a"), ("", ""), (None, ""), (" /x ", "x")],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_detect_language():
    assert detect_language("App.jsx") == ("jsx", "application/javascript")
    assert detect_language("index.HTML") == ("html", "text/html")
    assert detect_language("README.md") == ("markdown", "text/markdown")
    assert detect_language("Makefile") == ("txt", "text/plain")
    assert detect_language("archive.tar.gz") == ("txt", "text/plain")
