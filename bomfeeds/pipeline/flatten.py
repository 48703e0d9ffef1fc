"""Flatten nested feed XML into long records and pivot them back to wide rows.

A feed document is a sequence of area nodes (one per location), each holding
ordered period nodes, each holding ordered attribute nodes. Flattening emits one
``LongRecord`` per (area, period, attribute); pivoting groups the records by
(area, period) and spreads the attributes into columns, failing on duplicates.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from bomfeeds.common.errors import ConfigError, DuplicateAttributeError, MalformedFeedError
from bomfeeds.common.models import LongRecord

Descriptor = tuple[str | None, ...]


@dataclass(frozen=True)
class FeedLayout:
    name: str
    area_path: str
    id_attr: str
    period_path: str | None
    time_attrs: tuple[str, ...]
    descriptor_attrs: tuple[str, ...]
    descriptors: Mapping[Descriptor, str]
    columns: tuple[str, ...]
    discard: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        canonical = list(self.descriptors.values())
        dupes = sorted({name for name in canonical if canonical.count(name) > 1})
        if dupes:
            raise ConfigError(f"{self.name}: descriptors map to duplicate columns: {', '.join(dupes)}")
        unknown = sorted(set(canonical) - set(self.columns))
        if unknown:
            raise ConfigError(f"{self.name}: descriptor columns missing from schema: {', '.join(unknown)}")
        for key in self.descriptors:
            if len(key) != len(self.descriptor_attrs):
                raise ConfigError(f"{self.name}: descriptor {key!r} does not match {self.descriptor_attrs!r}")

    def canonical_name(self, descriptor: Descriptor, location_id: str) -> str:
        try:
            return self.descriptors[descriptor]
        except KeyError:
            raise MalformedFeedError(
                f"{self.name}: unknown attribute {descriptor!r} in area {location_id}"
            ) from None


def parse_document(xml_bytes: bytes) -> ET.Element:
    try:
        return ET.fromstring(xml_bytes)
    except ET.ParseError as exc:
        raise MalformedFeedError(f"Feed is not well-formed XML: {exc}") from exc


def _node_value(node: ET.Element) -> str | None:
    text = (node.text or "").strip()
    if not text:
        children = list(node)
        if len(children) == 1:
            text = (children[0].text or "").strip()
    return text or None


def _periods(area: ET.Element, layout: FeedLayout) -> list[ET.Element]:
    if layout.period_path is None:
        return [area]
    return area.findall(layout.period_path)


def _period_attrs(period: ET.Element, layout: FeedLayout, location_id: str, position: int) -> tuple[tuple[str, str], ...]:
    attrs = tuple((key, value) for key, value in period.attrib.items() if key != layout.id_attr)
    present = {key for key, _value in attrs}
    if not present & set(layout.time_attrs):
        period_index = period.get("index", str(position))
        raise MalformedFeedError(
            f"{layout.name}: area {location_id} period {period_index} has no time attributes"
        )
    return attrs


def _flatten_period(
    period: ET.Element,
    layout: FeedLayout,
    location_id: str,
    position: int,
) -> list[LongRecord]:
    period_attrs = _period_attrs(period, layout, location_id, position)
    records: list[LongRecord] = []
    for node in period:
        descriptor = tuple(node.get(attr) for attr in layout.descriptor_attrs)
        if descriptor[0] in layout.discard:
            continue
        records.append(
            LongRecord(
                location_id=location_id,
                period=period_attrs,
                attribute=layout.canonical_name(descriptor, location_id),
                value=_node_value(node),
            )
        )
    return records


def flatten_document(xml_bytes: bytes, layout: FeedLayout) -> list[LongRecord]:
    root = parse_document(xml_bytes)
    records: list[LongRecord] = []
    for area in root.findall(layout.area_path):
        location_id = area.get(layout.id_attr)
        if not location_id:
            raise MalformedFeedError(f"{layout.name}: area node without '{layout.id_attr}' attribute")
        for position, period in enumerate(_periods(area, layout)):
            records.extend(_flatten_period(period, layout, location_id, position))
    return records


def pivot_records(records: Iterable[LongRecord], columns: Iterable[str]) -> list[dict]:
    """Spread long records into one row per (location, period).

    Rows keep first-seen order. Every column in ``columns`` is present, ``None``
    when the period did not report it.
    """
    column_list = list(columns)
    grouped: dict[tuple, dict] = {}
    seen: dict[tuple, set[str]] = {}
    for record in records:
        key = (record.location_id, record.period)
        row = grouped.get(key)
        if row is None:
            row = {"location_id": record.location_id, **record.period_dict()}
            row.update({column: None for column in column_list})
            grouped[key] = row
            seen[key] = set()
        if record.attribute in seen[key]:
            raise DuplicateAttributeError(
                f"Duplicate attribute '{record.attribute}' for {record.location_id} "
                f"period {record.period_dict().get('index', '?')}"
            )
        seen[key].add(record.attribute)
        row[record.attribute] = record.value
    return list(grouped.values())
