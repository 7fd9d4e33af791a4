"""Tests for locating the host bot class by its correlation key."""

from __future__ import annotations

import logging

import pytest

from teamsgen.analyzers.host_locator import HostLocator
from teamsgen.errors import HostNotFoundError
from tests._fixtures.project_builder import APP_ID, OTHER_APP_ID, ProjectBuilder

PATTERN = "src/app/**/*.ts"


def test_locate_resolves_environment_reference(project_builder: ProjectBuilder) -> None:
    project_builder.write_bot()
    locator = HostLocator(environ={"MICROSOFT_APP_ID": APP_ID})

    host = locator.locate(project_builder.path(), PATTERN, "{{MICROSOFT_APP_ID}}")

    assert host.class_name == "MyBot"
    assert host.path == "src/app/myBot/MyBot.ts"
    assert host.correlation_key == APP_ID
    assert host.component_name == "myBot"


def test_locate_matches_literal_guid_argument(project_builder: ProjectBuilder) -> None:
    project_builder.write_bot(app_id=f'"{APP_ID}"')
    locator = HostLocator(environ={})

    host = locator.locate(project_builder.path(), PATTERN, APP_ID)

    assert host.class_name == "MyBot"


def test_locate_picks_the_bot_with_the_matching_key(project_builder: ProjectBuilder) -> None:
    project_builder.write_bot()
    project_builder.write_bot("otherBot", "OtherBot", app_id="process.env.OTHER_BOT_ID")
    locator = HostLocator(environ={"MICROSOFT_APP_ID": APP_ID, "OTHER_BOT_ID": OTHER_APP_ID})

    host = locator.locate(project_builder.path(), PATTERN, "{{OTHER_BOT_ID}}")

    assert host.class_name == "OtherBot"
    assert host.component_name == "otherBot"


def test_scan_returns_candidates_in_path_order(project_builder: ProjectBuilder) -> None:
    project_builder.write_bot("zetaBot", "ZetaBot", app_id=f'"{OTHER_APP_ID}"')
    project_builder.write_bot("alphaBot", "AlphaBot", app_id=f'"{APP_ID}"')

    candidates = HostLocator(environ={}).scan(project_builder.path(), PATTERN)

    assert [candidate.class_name for candidate in candidates] == ["AlphaBot", "ZetaBot"]


def test_unresolvable_candidate_is_skipped_with_warning(
    project_builder: ProjectBuilder, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    project_builder.write_bot()
    project_builder.write_bot("otherBot", "OtherBot", app_id=f'"{OTHER_APP_ID}"')
    caplog.set_level(logging.WARNING, logger="teamsgen")
    monkeypatch.setattr(logging.getLogger("teamsgen"), "propagate", True)

    candidates = HostLocator(environ={}).scan(project_builder.path(), PATTERN)

    assert [candidate.class_name for candidate in candidates] == ["OtherBot"]
    assert any("MyBot" in record.getMessage() for record in caplog.records)


def test_non_guid_value_excludes_candidate(project_builder: ProjectBuilder) -> None:
    project_builder.write_bot()
    locator = HostLocator(environ={"MICROSOFT_APP_ID": "not-a-guid"})

    assert locator.scan(project_builder.path(), PATTERN) == []


def test_classes_without_marker_are_ignored(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/app/helpers/Helper.ts": "export class Helper {}\n"})

    assert HostLocator(environ={}).scan(project_builder.path(), PATTERN) == []


def test_locate_without_match_raises(project_builder: ProjectBuilder) -> None:
    project_builder.write_bot()
    locator = HostLocator(environ={"MICROSOFT_APP_ID": APP_ID})

    with pytest.raises(HostNotFoundError) as excinfo:
        locator.locate(project_builder.path(), PATTERN, OTHER_APP_ID)

    message = str(excinfo.value)
    assert OTHER_APP_ID in message
    assert PATTERN in message


def test_custom_argument_index(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {"src/app/custom/CustomBot.ts": f'@BotDeclaration("{APP_ID}")\nexport class CustomBot {{}}\n'}
    )

    host = HostLocator(argument_index=0, environ={}).locate(project_builder.path(), PATTERN, APP_ID)

    assert host.class_name == "CustomBot"
