"""Tests for the shared data models."""

from __future__ import annotations

import pytest

from teamsgen.models import ComponentDescriptor, GeneratorOptions, SourceAugmentationPlan
from tests._fixtures.project_builder import APP_ID


def test_descriptor_from_title() -> None:
    descriptor = ComponentDescriptor.from_title("Search", host="existing")

    assert descriptor.name == "searchMessageExtension"
    assert descriptor.class_name == "SearchMessageExtension"
    assert descriptor.description == "Description of Search"
    assert descriptor.source_path == "src/app/searchMessageExtension/SearchMessageExtension.ts"


def test_descriptor_rejects_unknown_host() -> None:
    with pytest.raises(ValueError):
        ComponentDescriptor.from_title("Search", host="remote")


def test_plan_for_message_extension() -> None:
    descriptor = ComponentDescriptor.from_title("Search")
    plan = SourceAugmentationPlan.for_message_extension(descriptor)

    assert [edit.module for edit in plan.imports] == [
        "express-msteams-host",
        "../searchMessageExtension/SearchMessageExtension",
    ]
    assert plan.imports[0].named_bindings == ("MessageExtensionDeclaration",)
    assert plan.imports[1].default_binding == "SearchMessageExtension"
    assert plan.field_edit is not None
    assert plan.field_edit.name == "_searchMessageExtension"
    assert plan.field_edit.marker_argument == "searchMessageExtension"
    assert plan.statement is not None
    assert plan.statement.text == "this._searchMessageExtension = new SearchMessageExtension();"
    assert plan.guard_rerun is True


def test_options_reject_unknown_extension_type() -> None:
    with pytest.raises(ValueError):
        GeneratorOptions(descriptor=ComponentDescriptor.from_title("Search"), manifest_version="v1_9", extension_type="x")


def test_attach_new_bot_derives_names_and_host() -> None:
    options = GeneratorOptions(descriptor=ComponentDescriptor.from_title("Search"), manifest_version="v1_9")

    options.attach_new_bot(APP_ID)

    assert options.bot_title == "Search Bot"
    assert options.bot_name == "searchBot"
    assert options.bot_class_name == "SearchBot"
    assert options.descriptor.identifier == "{{MICROSOFT_APP_ID}}"
    assert options.host is not None
    assert options.host.path == "src/app/searchBot/SearchBot.ts"
    assert options.host.correlation_key == APP_ID
    assert options.template_values()["botClassName"] == "SearchBot"
