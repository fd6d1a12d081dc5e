"""Build a FeatureDataLayout from a tileset's defaultGeometrySchema."""

from __future__ import annotations

from typing import Any

from i3s.constants import I3S_NAMED_VERTEX_ATTRIBUTES
from i3s.tile import AttributeLayout, FeatureDataLayout, HeaderProperty, Tileset


def construct_feature_data_layout(tileset: Tileset) -> FeatureDataLayout:
    """Derive the uncompressed buffer layout of every tile in ``tileset``.

    Raises:
        MissingSchemaError: The tileset declares no geometry schema.
    """
    schema = tileset.default_geometry_schema

    vertex_attributes = _collect_attributes(schema.get("vertexAttributes") or {})
    feature_attributes = _collect_attributes(schema.get("featureAttributes") or {})

    header = [
        HeaderProperty(property=entry["property"], type=entry["type"])
        for entry in schema.get("header") or []
    ]

    return FeatureDataLayout(
        vertex_attributes=vertex_attributes,
        feature_attributes=feature_attributes,
        attributes_order=list(schema.get("ordering") or []),
        feature_attribute_order=list(schema.get("featureAttributeOrder") or []),
        header=header,
    )


def _collect_attributes(group: dict[str, Any]) -> dict[str, AttributeLayout]:
    """Copy declared attributes of one group, named vertex attributes first."""
    names = [name for name in I3S_NAMED_VERTEX_ATTRIBUTES if name in group]
    names += [name for name in group if name not in names]

    layouts: dict[str, AttributeLayout] = {}
    for name in names:
        attribute = group[name]
        if not attribute:
            continue
        layouts[name] = AttributeLayout(
            value_type=attribute["valueType"],
            values_per_element=int(attribute["valuesPerElement"]),
            byte_offset=int(attribute.get("byteOffset", 0)),
            count=int(attribute.get("count", 0)),
        )
    return layouts
