"""Pydantic return models for core computation functions."""

from pydantic import BaseModel, Field

from voxel_layers.models import VoxelDefinition


class TokenError(BaseModel):
    """One identifier token that failed to parse."""
    index: int = Field(ge=0)
    token: str
    message: str


class ParseResult(BaseModel):
    """Return type for parse_voxel_ids."""
    voxels: list[VoxelDefinition] = Field(default_factory=list)
    errors: list[TokenError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class KasaneImportResult(BaseModel):
    """Return type for kasane_to_voxels."""
    voxels: list[VoxelDefinition] = Field(default_factory=list)
    tooltips: dict[str, str] = Field(default_factory=dict)
    errors: list[TokenError] = Field(default_factory=list)
