"""Cell id encoding for tracker-data records.

A cell id labels a record with the detector component and data kind it
originates from. The layout is described by a string of ``name:width`` (or
``name:offset:width``) fields, packed from bit 0 upwards:

    >>> encoder = CellIDEncoder("sensorID:7,sparsePixelType:5")
    >>> encoder["sensorID"] = 71
    >>> encoder["sparsePixelType"] = 3
    >>> encoder.cell_id
    455
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .constants import SENSOR_ID_ALIASES, ZS_DATA_DEFAULT_ENCODING


@dataclass(frozen=True)
class CellField:
    name: str
    offset: int
    width: int

    @property
    def max_value(self) -> int:
        return (1 << self.width) - 1


def parse_encoding(encoding: str) -> List[CellField]:
    """Parse an encoding string into ordered cell fields."""
    fields: List[CellField] = []
    offset = 0
    for token in encoding.split(","):
        parts = [p.strip() for p in token.split(":")]
        if len(parts) == 2:
            name, width = parts[0], int(parts[1])
        elif len(parts) == 3:
            name, offset, width = parts[0], int(parts[1]), int(parts[2])
        else:
            raise ValueError(f"Invalid cell id field '{token}' in '{encoding}'")
        if not name or width <= 0:
            raise ValueError(f"Invalid cell id field '{token}' in '{encoding}'")
        fields.append(CellField(name=name, offset=offset, width=width))
        offset += width
    return fields


class CellIDEncoder:
    """Encodes named field values into a single integer cell id."""

    def __init__(self, encoding: str = ZS_DATA_DEFAULT_ENCODING):
        self.encoding = encoding
        self._fields: Dict[str, CellField] = {f.name: f for f in parse_encoding(encoding)}
        self._values: Dict[str, int] = {name: 0 for name in self._fields}

    def __setitem__(self, name: str, value: int) -> None:
        cell_field = self._field(name)
        if not 0 <= value <= cell_field.max_value:
            raise ValueError(
                f"Value {value} does not fit cell field '{name}' ({cell_field.width} bits)"
            )
        self._values[name] = value

    def __getitem__(self, name: str) -> int:
        self._field(name)
        return self._values[name]

    def _field(self, name: str) -> CellField:
        try:
            return self._fields[name]
        except KeyError:
            raise KeyError(f"Unknown cell field '{name}' in '{self.encoding}'") from None

    @property
    def cell_id(self) -> int:
        cell_id = 0
        for name, cell_field in self._fields.items():
            cell_id |= self._values[name] << cell_field.offset
        return cell_id

    def set_cell_id(self, record) -> None:
        """Stamp the current cell id onto a record."""
        record.cell_id = self.cell_id
        record.cell_encoding = self.encoding

    def decode(self, cell_id: int) -> Dict[str, int]:
        """Split a cell id back into its field values."""
        return {
            name: (cell_id >> f.offset) & f.max_value for name, f in self._fields.items()
        }


def cell_sensor_id(sensor_id: int) -> int:
    """Sensor id as written into the cell id (601 and 701 fold to 61 and 71)."""
    return SENSOR_ID_ALIASES.get(sensor_id, sensor_id)


def field_max_value(name: str, encoding: str = ZS_DATA_DEFAULT_ENCODING) -> int:
    """Largest value the named field of ``encoding`` can hold."""
    for cell_field in parse_encoding(encoding):
        if cell_field.name == name:
            return cell_field.max_value
    raise KeyError(f"No field '{name}' in cell id encoding '{encoding}'")
