"""Tests for re-exporting client components from the script bundle."""

from __future__ import annotations

from teamsgen.augment import has_export_declaration, insert_export_declaration
from tests._fixtures.project_builder import CLIENT_SCRIPT


def test_export_is_appended_with_comment() -> None:
    text = insert_export_declaration(
        CLIENT_SCRIPT.lstrip("\n"),
        "./searchMessageExtension/SearchMessageExtensionConfig",
        "Automatically added for the searchMessageExtension message extension",
    )

    assert text.endswith(
        'export * from "./myTab/MyTab";\n'
        "// Automatically added for the searchMessageExtension message extension\n"
        'export * from "./searchMessageExtension/SearchMessageExtensionConfig";\n'
    )


def test_existing_export_is_left_alone() -> None:
    script = CLIENT_SCRIPT.lstrip("\n")

    assert has_export_declaration(script, "./myTab/MyTab") is True
    assert insert_export_declaration(script, "./myTab/MyTab", "again") == script


def test_empty_script_gets_single_export() -> None:
    assert insert_export_declaration("", "./a/B") == 'export * from "./a/B";\n'


def test_export_follows_crlf_line_endings() -> None:
    script = CLIENT_SCRIPT.lstrip("\n").replace("\n", "\r\n")

    text = insert_export_declaration(script, "./searchMessageExtension/SearchMessageExtensionConfig", "Added")

    assert text.endswith(
        'export * from "./myTab/MyTab";\r\n// Added\r\nexport * from "./searchMessageExtension/SearchMessageExtensionConfig";\r\n'
    )
    assert text.count("\n") == text.count("\r\n")
