"""Tests for component name derivation."""

from __future__ import annotations

from pathlib import Path

from teamsgen.naming import (
    camel_case,
    class_name_for,
    fix_file_names,
    host_source_path,
    normalize_component_name,
    validate_component_title,
)


def test_camel_case_follows_word_boundaries() -> None:
    assert camel_case("My Search") == "mySearch"
    assert camel_case("my-search_extension") == "mySearchExtension"
    assert camel_case("XMLParser tool") == "xmlParserTool"
    assert camel_case("Café Finder") == "cafeFinder"
    assert camel_case("Bob's search 2") == "bobsSearch2"


def test_suffix_is_added_once() -> None:
    assert normalize_component_name("Search") == "searchMessageExtension"
    assert normalize_component_name("Search Message Extension") == "searchMessageExtension"
    assert class_name_for("searchMessageExtension") == "SearchMessageExtension"


def test_host_source_path() -> None:
    assert host_source_path("myBot", "MyBot") == "src/app/myBot/MyBot.ts"


def test_validate_title_length(tmp_path: Path) -> None:
    assert validate_component_title("", tmp_path) is not None
    assert validate_component_title("x" * 33, tmp_path) is not None
    assert validate_component_title("x" * 32, tmp_path) is None


def test_validate_title_rejects_existing_file(tmp_path: Path) -> None:
    target = tmp_path / "src/app/searchMessageExtension/SearchMessageExtension.ts"
    target.parent.mkdir(parents=True)
    target.write_text("", encoding="utf-8")

    message = validate_component_title("Search", tmp_path, host="existing")

    assert message == "There's already a file with the name of searchMessageExtension/SearchMessageExtension.ts"
    assert validate_component_title("Search", tmp_path, host="external") is None


def test_fix_file_names_leaves_unknown_placeholders() -> None:
    values = {"messageExtensionName": "searchMessageExtension"}

    assert fix_file_names("src/app/{messageExtensionName}/{other}.ts", values) == (
        "src/app/searchMessageExtension/{other}.ts"
    )
