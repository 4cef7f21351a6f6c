"""Submission types shared by the remote API and the device-side queue.

A capture form produces either a :class:`ChecklistSubmission` or a
:class:`SupplySubmission`. The same classes validate incoming JSON on the
server and rebuild queued rows on the device, so both halves agree on one
payload shape.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from frota.utils.error_handler import ValidationError
from frota.utils.helpers import (
    parse_datetime,
    parse_positive_decimal,
    parse_reference,
    utcnow,
)


class ChecklistStatus(str, Enum):
    OK = 'ok'
    NOT_OK = 'not_ok'
    NOT_APPLICABLE = 'not_applicable'


class FuelType(str, Enum):
    GASOLINE = 'gasoline'
    DIESEL = 'diesel'
    ETHANOL = 'ethanol'
    NATURAL_GAS = 'natural_gas'


class RecordKind(str, Enum):
    CHECKLIST = 'checklist'
    SUPPLY = 'supply'


def _parse_enum(enum_cls, value, field_name):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f'Invalid {field_name}: {value!r} (expected one of {allowed})')


@dataclass
class ChecklistItem:
    id: str
    name: str
    status: ChecklistStatus = ChecklistStatus.NOT_APPLICABLE
    note: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValidationError('Checklist items must be objects')
        item_id = str(data.get('id') or '').strip()
        name = str(data.get('name') or '').strip()
        if not item_id or not name:
            raise ValidationError('Checklist items need an id and a name')
        note = data.get('note')
        return cls(
            id=item_id,
            name=name,
            status=_parse_enum(ChecklistStatus, data.get('status'), 'item status'),
            note=note.strip() if isinstance(note, str) and note.strip() else None,
        )

    def to_dict(self):
        data = {'id': self.id, 'name': self.name, 'status': self.status.value}
        if self.note:
            data['note'] = self.note
        return data


DEFAULT_CHECKLIST_ITEMS = (
    ('brakes', 'Brake system'),
    ('tires', 'Tire condition'),
    ('lights', 'Lighting system'),
    ('oil', 'Oil level'),
    ('coolant', 'Coolant level'),
    ('fuel', 'Fuel level'),
    ('cleanliness', 'General cleanliness'),
    ('documents', 'Vehicle documents'),
    ('extinguisher', 'Fire extinguisher'),
    ('triangle', 'Warning triangle'),
)


def default_checklist_items():
    """Fresh list of the standard inspection items, all not applicable."""
    return [ChecklistItem(id=item_id, name=name) for item_id, name in DEFAULT_CHECKLIST_ITEMS]


def parse_checklist_items(raw):
    """Parse stored items (JSON text or list); unreadable input gives []."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(parsed, list):
            return []
        return [ChecklistItem.from_dict(item) for item in parsed]
    except (ValueError, ValidationError):
        return []


def dump_checklist_items(items):
    return json.dumps([item.to_dict() for item in items])


@dataclass
class ChecklistSubmission:
    vehicle_id: int
    operator_id: int
    items: List[ChecklistItem]
    notes: Optional[str] = None
    checked_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_dict(cls, data, default_operator_id=None):
        if not isinstance(data, dict):
            raise ValidationError('Invalid checklist data')

        raw_items = data.get('items')
        if not isinstance(raw_items, list) or not raw_items:
            raise ValidationError('A checklist needs at least one inspected item')

        notes = data.get('notes')
        checked_at = data.get('checked_at')
        return cls(
            vehicle_id=parse_reference(data.get('vehicle_id'), 'vehicle_id'),
            operator_id=parse_reference(data.get('operator_id') or default_operator_id, 'operator_id'),
            items=[ChecklistItem.from_dict(item) for item in raw_items],
            notes=notes.strip() if isinstance(notes, str) and notes.strip() else None,
            checked_at=parse_datetime(checked_at, 'checked_at') if checked_at else utcnow(),
        )

    def to_payload(self):
        return {
            'vehicle_id': self.vehicle_id,
            'operator_id': self.operator_id,
            'items': [item.to_dict() for item in self.items],
            'notes': self.notes,
            'checked_at': self.checked_at.isoformat(),
        }


# (precision, scale) of the supplies.liters and supplies.total_value columns
LITERS_DIGITS = (10, 2)
TOTAL_VALUE_DIGITS = (12, 2)


@dataclass
class SupplySubmission:
    vehicle_id: int
    operator_id: int
    station_id: int
    fuel_type: FuelType
    liters: Decimal
    total_value: Decimal
    supplied_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_dict(cls, data, default_operator_id=None):
        if not isinstance(data, dict):
            raise ValidationError('Invalid supply data')

        supplied_at = data.get('supplied_at')
        return cls(
            vehicle_id=parse_reference(data.get('vehicle_id'), 'vehicle_id'),
            operator_id=parse_reference(data.get('operator_id') or default_operator_id, 'operator_id'),
            station_id=parse_reference(data.get('station_id'), 'station_id'),
            fuel_type=_parse_enum(FuelType, data.get('fuel_type'), 'fuel_type'),
            liters=parse_positive_decimal(data.get('liters'), 'liters', *LITERS_DIGITS),
            total_value=parse_positive_decimal(data.get('total_value'), 'total_value', *TOTAL_VALUE_DIGITS),
            supplied_at=parse_datetime(supplied_at, 'supplied_at') if supplied_at else utcnow(),
        )

    def to_payload(self):
        return {
            'vehicle_id': self.vehicle_id,
            'operator_id': self.operator_id,
            'station_id': self.station_id,
            'fuel_type': self.fuel_type.value,
            'liters': str(self.liters),
            'total_value': str(self.total_value),
            'supplied_at': self.supplied_at.isoformat(),
        }
