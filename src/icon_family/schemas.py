from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ManifestIcon(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    src: str
    sizes: str
    # "type" is a builtin; keep the JSON key while using a safe attribute name.
    mime_type: str = Field(alias="type", serialization_alias="type")


class WebManifest(BaseModel):
    """Web app manifest (only the ``icons`` member is generated)."""

    icons: list[ManifestIcon] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(indent=4, by_alias=True) + "\n"
