import json

import pytest


def test_builtins_are_present_and_flagged():
    from promptflow.polish import BUILT_IN_PRESETS, PresetCatalog

    ids = [p.id for p in BUILT_IN_PRESETS]
    assert ids == ["default", "precise", "frontend-ui", "bug-report", "refactor"]
    assert all(p.is_built_in for p in BUILT_IN_PRESETS)
    assert [p.id for p in BUILT_IN_PRESETS if p.is_default] == ["default"]

    catalog = PresetCatalog()
    assert catalog.active("precise").id == "precise"
    assert catalog.active("does-not-exist").id == "default"
    assert catalog.active(None).id == "default"


def test_builtins_cannot_be_modified_or_deleted():
    from promptflow.polish import PresetCatalog, PresetError

    catalog = PresetCatalog()
    with pytest.raises(PresetError):
        catalog.update("default", name="Hacked")
    with pytest.raises(PresetError):
        catalog.delete("precise")

    # mutating a returned copy leaves the catalogue untouched
    copy = catalog.get("default")
    copy.name = "Changed"
    assert catalog.get("default").name == "Default Enhancement"


def test_user_presets_crud(preset):
    from promptflow.polish import PresetCatalog, PresetError

    catalog = PresetCatalog([preset])
    assert catalog.get("custom-1") is preset

    updated = catalog.update("custom-1", name="Renamed", temperature=0.9)
    assert updated.name == "Renamed"
    assert catalog.active("custom-1").temperature == 0.9

    with pytest.raises(PresetError):
        catalog.update("custom-1", id="other")
    with pytest.raises(PresetError):
        catalog.add(preset)

    catalog.delete("custom-1")
    assert catalog.get("custom-1") is None
    with pytest.raises(PresetError):
        catalog.delete("custom-1")


def test_preset_dict_roundtrip_uses_store_keys(preset):
    from promptflow.polish import PolishPreset

    data = preset.to_dict()
    assert data["systemPrompt"] == preset.system_prompt
    assert data["isBuiltIn"] is False
    assert PolishPreset.from_dict(data) == preset


def test_validate_preset_creator_output_clamps_temperature():
    from promptflow.polish import validate_preset_creator_output

    draft = validate_preset_creator_output(
        {"systemPrompt": "  You are X.  ", "name": " Tidy ", "temperature": 1.7}
    )
    assert draft.system_prompt == "You are X."
    assert draft.name == "Tidy"
    assert draft.temperature == 1.0

    assert validate_preset_creator_output({"systemPrompt": "p", "temperature": -2}).temperature == 0.0
    assert validate_preset_creator_output({"systemPrompt": "p", "temperature": "hot"}).temperature is None


@pytest.mark.parametrize(
    "data",
    [
        {"name": "no prompt"},
        {"systemPrompt": "   "},
        {"systemPrompt": 42},
        ["not", "an", "object"],
    ],
)
def test_validate_preset_creator_output_rejects(data):
    from promptflow.llm import ErrorCode, LLMValidationError
    from promptflow.polish import validate_preset_creator_output

    with pytest.raises(LLMValidationError) as exc:
        validate_preset_creator_output(data)
    assert exc.value.code == ErrorCode.SCHEMA_ERROR


def test_generate_preset_repairs_then_builds_user_preset(provider_config, scripted_client_factory, sleeps):
    from promptflow.polish import draft_to_preset, generate_preset

    good = json.dumps({"name": "Email", "icon": "📧", "temperature": 0.5, "systemPrompt": "You are an email tool."})
    client = scripted_client_factory(["{'name': broken", good])

    draft = generate_preset("Polish my work emails so they sound professional", provider_config, client=client)

    assert draft.name == "Email"
    assert len(client.requests) == 2
    assert client.requests[0].temperature == 0.7
    assert client.requests[0].max_tokens == 1200

    preset = draft_to_preset(draft, "Polish my work emails so they sound professional")
    assert preset.is_built_in is False
    assert preset.name == "Email"
    assert preset.description == "Polish my work emails so they sound professional"
    assert preset.temperature == 0.5
    assert preset.id


def test_draft_to_preset_fills_defaults():
    from promptflow.polish import PresetDraft, draft_to_preset

    preset = draft_to_preset(PresetDraft(system_prompt="p"), "A very long description of a style")
    assert preset.name == "A very long descript..."
    assert preset.icon == "✨"
    assert preset.temperature == 0.7


def test_generate_preset_without_client_closes_the_one_it_builds(monkeypatch, provider_config, scripted_client_factory, sleeps):
    from promptflow.polish import generate_preset

    good = json.dumps({"name": "Email", "systemPrompt": "You are an email tool."})
    owned = scripted_client_factory(["not json at all", good])
    monkeypatch.setattr("promptflow.llm.factory.build_llm", lambda: owned)

    draft = generate_preset("emails", provider_config)

    assert draft.name == "Email"
    assert len(owned.requests) == 2
    assert owned.closed is True
