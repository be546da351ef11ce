"""
Content classification of packages and deployments.

A package is described by a set of content tags (DbPackageContent). Tags
come from two sources:
- PackageContent: the structured descriptor taken from a package manifest
  and stored on each deployment
- LegacyDbPackageContent: the flat boolean record older schema versions
  wrote to package documents

Both are normalized to the same tag list by normalize_content(), which is
what DbPackage.content runs every stored value through.

Invariants:
    - A normalized tag list is never empty for a structured or legacy input
    - Legacy records are migrated on read; they are never written back
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter


class DbPackageContent(str, Enum):
    """Content tag vocabulary. Stored as the tag name."""

    PLAYABLE = "Playable"
    EXAMPLE = "Example"
    NOT_EXAMPLE = "NotExample"
    ASSET = "Asset"
    MODELS = "Models"
    ANIMATIONS = "Animations"
    TEXTURES = "Textures"
    MATERIALS = "Materials"
    FONTS = "Fonts"
    CODE = "Code"
    SCHEMA = "Schema"
    AUDIO = "Audio"
    OTHER = "Other"
    TOOL = "Tool"
    MOD = "Mod"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, value: str) -> DbPackageContent:
        """Parse a tag name.

        Raises:
            ValueError: If value is not a known tag
        """
        for tag in cls:
            if tag.value == value:
                return tag
        valid = [t.value for t in cls]
        raise ValueError(f"Invalid content tag '{value}'. Valid tags: {valid}")


class PlayableContent(BaseModel):
    type: Literal["Playable"] = "Playable"
    example: bool = False


class AssetContent(BaseModel):
    type: Literal["Asset"] = "Asset"
    models: bool = False
    animations: bool = False
    textures: bool = False
    materials: bool = False
    audio: bool = False
    fonts: bool = False
    code: bool = False
    schema_: bool = Field(
        default=False,
        validation_alias=AliasChoices("schema", "schema_"),
        serialization_alias="schema",
    )


class ToolContent(BaseModel):
    type: Literal["Tool"] = "Tool"


class ModContent(BaseModel):
    type: Literal["Mod"] = "Mod"
    for_playables: list[str] = Field(default_factory=list)


PackageContent = Annotated[
    Union[PlayableContent, AssetContent, ToolContent, ModContent],
    Field(discriminator="type"),
]

_package_content_adapter: TypeAdapter[Any] = TypeAdapter(PackageContent)


class LegacyDbPackageContent(BaseModel):
    """Flat content flags written by older package documents."""

    playable: bool = False
    example: bool = False
    asset: bool = False
    models: bool = False
    animations: bool = False
    textures: bool = False
    materials: bool = False
    fonts: bool = False
    code: bool = False
    schema_: bool = Field(
        default=False,
        validation_alias=AliasChoices("schema", "schema_"),
        serialization_alias="schema",
    )
    audio: bool = False
    tool: bool = False
    mod_: bool = Field(default=False, validation_alias=AliasChoices("mod_", "mod"))


def tags_from_content(content: Any) -> list[DbPackageContent]:
    """Build tags from a structured PackageContent descriptor.

    An Asset with no recognized sub-kind is tagged Asset + Other.
    """
    if isinstance(content, PlayableContent):
        if content.example:
            return [DbPackageContent.PLAYABLE, DbPackageContent.EXAMPLE]
        return [DbPackageContent.PLAYABLE, DbPackageContent.NOT_EXAMPLE]

    if isinstance(content, AssetContent):
        tags = [DbPackageContent.ASSET]
        flags = (
            (content.models, DbPackageContent.MODELS),
            (content.animations, DbPackageContent.ANIMATIONS),
            (content.textures, DbPackageContent.TEXTURES),
            (content.materials, DbPackageContent.MATERIALS),
            (content.audio, DbPackageContent.AUDIO),
            (content.fonts, DbPackageContent.FONTS),
            (content.code, DbPackageContent.CODE),
            (content.schema_, DbPackageContent.SCHEMA),
        )
        tags.extend(tag for enabled, tag in flags if enabled)
        if len(tags) == 1:
            tags.append(DbPackageContent.OTHER)
        return tags

    if isinstance(content, ToolContent):
        return [DbPackageContent.TOOL]

    if isinstance(content, ModContent):
        return [DbPackageContent.MOD]

    raise ValueError(f"Not a PackageContent descriptor: {type(content).__name__}")


def tags_from_legacy(legacy: LegacyDbPackageContent) -> list[DbPackageContent]:
    """Migrate a legacy flag record to tags.

    Every flag is independent. A record with no flag set becomes [Other].
    """
    tags: list[DbPackageContent] = []
    if legacy.playable:
        tags.append(DbPackageContent.PLAYABLE)
        tags.append(DbPackageContent.EXAMPLE if legacy.example else DbPackageContent.NOT_EXAMPLE)
    if legacy.asset:
        tags.append(DbPackageContent.ASSET)
        flags = (
            (legacy.models, DbPackageContent.MODELS),
            (legacy.animations, DbPackageContent.ANIMATIONS),
            (legacy.textures, DbPackageContent.TEXTURES),
            (legacy.materials, DbPackageContent.MATERIALS),
            (legacy.fonts, DbPackageContent.FONTS),
            (legacy.code, DbPackageContent.CODE),
            (legacy.schema_, DbPackageContent.SCHEMA),
            (legacy.audio, DbPackageContent.AUDIO),
        )
        tags.extend(tag for enabled, tag in flags if enabled)
    if legacy.tool:
        tags.append(DbPackageContent.TOOL)
    if legacy.mod_:
        tags.append(DbPackageContent.MOD)
    if not tags:
        tags.append(DbPackageContent.OTHER)
    return tags


def parse_package_content(data: Any) -> Any:
    """Validate a stored structured descriptor (tagged by 'type')."""
    return _package_content_adapter.validate_python(data)


def normalize_content(value: Any) -> list[DbPackageContent]:
    """Normalize any accepted content representation to a tag list.

    Accepts:
        - a list, tuple or set of tags or tag names (passed through)
        - a LegacyDbPackageContent or a mapping of legacy flags (migrated)
        - a structured PackageContent or a mapping with a 'type' key
        - None (no content recorded)

    Raises:
        ValueError: If the value has none of these shapes or holds an
            unknown tag name
    """
    if value is None:
        return []

    if isinstance(value, LegacyDbPackageContent):
        return tags_from_legacy(value)

    if isinstance(value, (PlayableContent, AssetContent, ToolContent, ModContent)):
        return tags_from_content(value)

    if isinstance(value, Mapping):
        if "type" in value:
            return tags_from_content(parse_package_content(value))
        return tags_from_legacy(LegacyDbPackageContent.model_validate(value))

    if isinstance(value, (set, frozenset)):
        # Sets have no order of their own; use vocabulary order
        tags = {_as_tag(v) for v in value}
        return [tag for tag in DbPackageContent if tag in tags]

    if isinstance(value, (list, tuple)):
        return [_as_tag(v) for v in value]

    raise ValueError(f"Unsupported content value of type {type(value).__name__}")


def _as_tag(value: Any) -> DbPackageContent:
    if isinstance(value, DbPackageContent):
        return value
    if isinstance(value, str):
        return DbPackageContent.from_str(value)
    raise ValueError(f"Content tag must be a string, got {type(value).__name__}")
