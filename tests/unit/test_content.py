"""
Unit tests for content tags.

Tests cover:
- Tags from structured PackageContent descriptors
- Migration of legacy boolean content flags
- normalize_content over every accepted input shape
"""

import pytest

from ambient_db.content import (
    AssetContent,
    DbPackageContent as C,
    LegacyDbPackageContent,
    ModContent,
    PlayableContent,
    ToolContent,
    normalize_content,
    parse_package_content,
    tags_from_content,
    tags_from_legacy,
)


class TestTagsFromContent:
    """Tests for tags_from_content."""

    def test_playable_not_example(self):
        assert tags_from_content(PlayableContent()) == [C.PLAYABLE, C.NOT_EXAMPLE]

    def test_playable_example(self):
        assert tags_from_content(PlayableContent(example=True)) == [C.PLAYABLE, C.EXAMPLE]

    def test_asset_without_sub_kind_is_other(self):
        """Asset with all sub-flags false gets Other."""
        assert set(tags_from_content(AssetContent())) == {C.ASSET, C.OTHER}

    def test_asset_with_sub_kinds(self):
        tags = tags_from_content(AssetContent(models=True, audio=True, fonts=True))
        assert tags == [C.ASSET, C.MODELS, C.AUDIO, C.FONTS]
        assert C.OTHER not in tags

    def test_asset_schema_flag(self):
        assert tags_from_content(AssetContent(schema=True)) == [C.ASSET, C.SCHEMA]

    def test_tool(self):
        assert tags_from_content(ToolContent()) == [C.TOOL]

    def test_mod(self):
        assert tags_from_content(ModContent(for_playables=["pkg1"])) == [C.MOD]

    def test_not_a_descriptor_raises(self):
        with pytest.raises(ValueError):
            tags_from_content("Playable")


class TestTagsFromLegacy:
    """Tests for tags_from_legacy."""

    def test_all_false_is_other(self):
        assert tags_from_legacy(LegacyDbPackageContent()) == [C.OTHER]

    def test_asset_with_models(self):
        """At least one sub-flag fired, so no Other."""
        tags = tags_from_legacy(LegacyDbPackageContent(asset=True, models=True))
        assert set(tags) == {C.ASSET, C.MODELS}

    def test_asset_without_sub_flags(self):
        """Legacy asset without sub-flags is just Asset."""
        assert tags_from_legacy(LegacyDbPackageContent(asset=True)) == [C.ASSET]

    def test_sub_flags_ignored_without_asset(self):
        tags = tags_from_legacy(LegacyDbPackageContent(models=True, textures=True))
        assert tags == [C.OTHER]

    def test_playable_example(self):
        tags = tags_from_legacy(LegacyDbPackageContent(playable=True, example=True))
        assert tags == [C.PLAYABLE, C.EXAMPLE]

    def test_playable_not_example(self):
        assert tags_from_legacy(LegacyDbPackageContent(playable=True)) == [
            C.PLAYABLE,
            C.NOT_EXAMPLE,
        ]

    def test_flags_are_independent(self):
        legacy = LegacyDbPackageContent(
            playable=True,
            asset=True,
            fonts=True,
            audio=True,
            tool=True,
            mod_=True,
        )
        assert tags_from_legacy(legacy) == [
            C.PLAYABLE,
            C.NOT_EXAMPLE,
            C.ASSET,
            C.FONTS,
            C.AUDIO,
            C.TOOL,
            C.MOD,
        ]

    def test_mod_accepts_both_wire_names(self):
        assert LegacyDbPackageContent.model_validate({"mod_": True}).mod_ is True
        assert LegacyDbPackageContent.model_validate({"mod": True}).mod_ is True


class TestNormalizeContent:
    """Tests for normalize_content."""

    def test_none_is_empty(self):
        assert normalize_content(None) == []

    def test_tag_list_passes_through(self):
        assert normalize_content([C.TOOL, C.MOD]) == [C.TOOL, C.MOD]

    def test_tag_names_are_parsed(self):
        assert normalize_content(["Playable", "Example"]) == [C.PLAYABLE, C.EXAMPLE]

    def test_set_uses_vocabulary_order(self):
        assert normalize_content({C.MOD, C.PLAYABLE}) == [C.PLAYABLE, C.MOD]

    def test_unknown_tag_raises(self):
        with pytest.raises(ValueError, match="Invalid content tag"):
            normalize_content(["Spaceship"])

    def test_legacy_mapping_all_false(self):
        assert normalize_content({}) == [C.OTHER]
        assert normalize_content({"playable": False, "asset": False}) == [C.OTHER]

    def test_legacy_mapping_asset_models(self):
        assert set(normalize_content({"asset": True, "models": True})) == {C.ASSET, C.MODELS}

    def test_legacy_model(self):
        assert normalize_content(LegacyDbPackageContent(tool=True)) == [C.TOOL]

    def test_structured_asset_without_sub_flags(self):
        assert set(normalize_content(AssetContent())) == {C.ASSET, C.OTHER}

    def test_structured_mapping(self):
        tags = normalize_content({"type": "Asset", "textures": True})
        assert tags == [C.ASSET, C.TEXTURES]

    def test_unsupported_type_raises(self):
        with pytest.raises(ValueError, match="Unsupported content value"):
            normalize_content(42)


class TestPackageContent:
    """Tests for the structured descriptor wire form."""

    def test_parse_tagged(self):
        content = parse_package_content({"type": "Playable", "example": True})
        assert content == PlayableContent(example=True)

    def test_parse_mod(self):
        content = parse_package_content({"type": "Mod", "for_playables": ["a", "b"]})
        assert isinstance(content, ModContent)
        assert content.for_playables == ["a", "b"]

    def test_asset_schema_wire_name(self):
        """The schema flag is stored under 'schema'."""
        content = parse_package_content({"type": "Asset", "schema": True})
        assert content.schema_ is True
        assert content.model_dump(by_alias=True)["schema"] is True

    def test_unknown_variant_raises(self):
        with pytest.raises(ValueError):
            parse_package_content({"type": "Spaceship"})
