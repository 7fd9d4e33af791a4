"""Tests for the version specific manifest mutations."""

from __future__ import annotations

from typing import Any

import pytest

from teamsgen.errors import InvalidVersionError, ManifestError
from teamsgen.manifest.generators import ManifestGenerator19, ManifestGeneratorDevPreview
from teamsgen.models import ComponentDescriptor, GeneratorOptions
from tests._fixtures.project_builder import APP_ID


def _options(title: str = "Search", **kwargs: Any) -> GeneratorOptions:
    descriptor = ComponentDescriptor.from_title(title, host="existing", identifier="{{MICROSOFT_APP_ID}}")
    return GeneratorOptions(descriptor=descriptor, manifest_version="v1_9", **kwargs)


def test_query_command_is_added_to_new_compose_extension() -> None:
    manifest: dict[str, Any] = {"manifestVersion": "1.9"}

    command = ManifestGenerator19().update_message_extension_manifest(manifest, _options())

    assert manifest["composeExtensions"] == [
        {"botId": "{{MICROSOFT_APP_ID}}", "canUpdateConfiguration": True, "commands": [command]}
    ]
    assert command["id"] == "searchMessageExtension"
    assert command["title"] == "Search"
    assert command["description"] == "Description of Search"
    assert command["initialRun"] is True
    assert command["type"] == "query"
    assert command["parameters"][0]["name"] == "parameter"


def test_command_joins_existing_extension_for_same_bot() -> None:
    manifest: dict[str, Any] = {
        "composeExtensions": [
            {"botId": APP_ID, "commands": []},
            {"botId": "{{MICROSOFT_APP_ID}}", "canUpdateConfiguration": True, "commands": [{"id": "other"}]},
        ]
    }

    ManifestGenerator19().update_message_extension_manifest(manifest, _options())

    assert len(manifest["composeExtensions"]) == 2
    assert [c["id"] for c in manifest["composeExtensions"][1]["commands"]] == ["other", "searchMessageExtension"]
    assert manifest["composeExtensions"][0]["commands"] == []


def test_duplicate_command_id_is_refused() -> None:
    manifest: dict[str, Any] = {}
    generator = ManifestGenerator19()
    generator.update_message_extension_manifest(manifest, _options())

    with pytest.raises(ManifestError):
        generator.update_message_extension_manifest(manifest, _options())


def test_non_list_compose_extensions_is_refused() -> None:
    with pytest.raises(ManifestError):
        ManifestGenerator19().update_message_extension_manifest({"composeExtensions": {}}, _options())


def test_action_command_requires_preview_manifest() -> None:
    options = _options(extension_type="action", action_input_type="static")

    with pytest.raises(InvalidVersionError):
        ManifestGenerator19().update_message_extension_manifest({}, options)


def test_static_action_command_on_dev_preview() -> None:
    options = _options(
        extension_type="action",
        action_input_type="static",
        action_context=["compose", "message", "bogus"],
    )

    command = ManifestGeneratorDevPreview().update_message_extension_manifest({}, options)

    assert command["type"] == "action"
    assert command["context"] == ["compose", "message"]
    assert command["fetchTask"] is False
    assert [p["name"] for p in command["parameters"]] == ["email", "includeImage"]


def test_task_module_action_fetches_task() -> None:
    options = _options(extension_type="action", action_input_type="taskModule")

    command = ManifestGeneratorDevPreview().update_message_extension_manifest({}, options)

    assert command["fetchTask"] is True
    assert options.uses_task_module is True


def test_command_joins_extension_whose_bot_id_resolves_to_the_same_guid() -> None:
    manifest: dict[str, Any] = {
        "composeExtensions": [{"botId": "{{MICROSOFT_APP_ID}}", "commands": [{"id": "other"}]}]
    }
    descriptor = ComponentDescriptor.from_title("Search", host="existing", identifier=APP_ID)
    options = GeneratorOptions(descriptor=descriptor, manifest_version="v1_9")

    ManifestGenerator19().update_message_extension_manifest(manifest, options, {"MICROSOFT_APP_ID": APP_ID})

    assert len(manifest["composeExtensions"]) == 1
    assert [c["id"] for c in manifest["composeExtensions"][0]["commands"]] == ["other", "searchMessageExtension"]


def test_unresolvable_bot_ids_are_compared_verbatim() -> None:
    manifest: dict[str, Any] = {"composeExtensions": [{"botId": "{{OTHER_BOT_ID}}", "commands": []}]}

    ManifestGenerator19().update_message_extension_manifest(manifest, _options(), {})

    assert [e["botId"] for e in manifest["composeExtensions"]] == ["{{OTHER_BOT_ID}}", "{{MICROSOFT_APP_ID}}"]
