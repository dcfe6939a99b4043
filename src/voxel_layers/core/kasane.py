"""Kasane JSON import: data documents keyed by spatiotemporal ids."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..models import Range, Scalar, Unbounded, VoxelDefinition
from .models import KasaneImportResult, TokenError
from .expand import definition_id
from .ranges import axis_size

logger = logging.getLogger(__name__)


class KasaneImportError(ValueError):
    """The document is not valid JSON or does not match the Kasane schema."""


class KasaneMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(alias="kasaneSchemaVersion")
    description: Optional[str] = None


class KasaneId(BaseModel):
    z: int = Field(ge=0)
    f: Optional[list[int]] = None
    x: Optional[list[int]] = None
    y: Optional[list[int]] = None
    i: Optional[float] = Field(default=None, gt=0)
    t: Optional[list[int]] = None
    ref: int = Field(ge=0)

    @field_validator("f", "x", "y", "t")
    @classmethod
    def one_or_two_values(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        if v is not None and len(v) not in (1, 2):
            raise ValueError(f"expected 1 or 2 values, got {len(v)}")
        return v


class KasaneDataEntry(BaseModel):
    name: str
    value: list[Any]
    ids: list[KasaneId]


class KasaneDocument(BaseModel):
    meta: KasaneMeta
    option: Any = None
    data: list[KasaneDataEntry]


def _dimension(dim: Optional[list[int]], zoom: int, altitude: bool):
    if dim is None:
        if altitude:
            return Unbounded()
        return Scalar(value=0) if zoom == 0 else Range(lo=0, hi=axis_size(zoom) - 1)
    if len(dim) == 1:
        return Scalar(value=dim[0])
    return Range(lo=dim[0], hi=dim[1])


def _time_window(kid: KasaneId) -> tuple[Optional[float], Optional[float]]:
    if kid.i is None or kid.t is None:
        return None, None
    if len(kid.t) == 1:
        return kid.i * kid.t[0], kid.i * (kid.t[0] + 1)
    t1, t2 = kid.t
    return kid.i * t1, kid.i * (t2 + 1)


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _to_voxel(kid: KasaneId) -> VoxelDefinition:
    start_time, end_time = _time_window(kid)
    return VoxelDefinition(
        z=kid.z,
        f=_dimension(kid.f, kid.z, altitude=True),
        x=_dimension(kid.x, kid.z, altitude=False),
        y=_dimension(kid.y, kid.z, altitude=False),
        start_time=start_time,
        end_time=end_time,
    )


def kasane_to_voxels(document: KasaneDocument) -> KasaneImportResult:
    """Collect unique voxel definitions and a tooltip per voxel id.

    Tooltips are keyed by the same id the projector reports for compiled
    tiles, so a picked polygon can be looked up directly. An id that does
    not describe a valid voxel is reported in ``errors`` and skipped.
    """
    result = KasaneImportResult()
    index = -1
    for entry in document.data:
        for position, kid in enumerate(entry.ids):
            index += 1
            try:
                voxel = _to_voxel(kid)
            except ValidationError as e:
                token = f"{entry.name}[{position}]"
                logger.warning("Skipping Kasane id %s: %s", token, e)
                result.errors.append(TokenError(index=index, token=token, message=str(e)))
                continue
            key = definition_id(voxel)
            if key not in result.tooltips:
                result.voxels.append(voxel)

            if kid.ref >= len(entry.value):
                logger.warning(
                    "Id %s in '%s' refers to value %d but only %d exist",
                    key, entry.name, kid.ref, len(entry.value),
                )
                value_text = f"{entry.name}: (missing)"
            else:
                value_text = f"{entry.name}: {_format_value(entry.value[kid.ref])}"

            existing = result.tooltips.get(key)
            result.tooltips[key] = f"{existing}\n{value_text}" if existing else f"{key} | {value_text}"
    return result


def load_kasane(source: Union[str, Path, dict]) -> KasaneImportResult:
    """Load a Kasane document from a path, a JSON string or a parsed dict."""
    if isinstance(source, Path):
        source = source.read_text(encoding="utf-8")
    if isinstance(source, str):
        try:
            source = json.loads(source)
        except json.JSONDecodeError as e:
            raise KasaneImportError(f"Invalid JSON: {e}") from e
    try:
        document = KasaneDocument.model_validate(source)
    except ValidationError as e:
        raise KasaneImportError(f"Not a Kasane document: {e}") from e
    return kasane_to_voxels(document)
