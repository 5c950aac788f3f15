from __future__ import annotations

from dataclasses import fields


class RecordRowMixin:
    """
    Bridges a table row and its domain record.

    Column attribute names equal the record's field names, so the mapping is
    purely by name. Subclasses set `record_type`.
    """
    record_type = None

    @classmethod
    def from_record(cls, record):
        return cls(**{f.name: getattr(record, f.name) for f in fields(cls.record_type)})

    def to_record(self):
        return self.record_type(**{f.name: getattr(self, f.name) for f in fields(self.record_type)})

    def apply_record(self, record) -> None:
        for f in fields(self.record_type):
            if f.name in ("id", "created_at"):
                continue
            setattr(self, f.name, getattr(record, f.name))

    def to_dict(self) -> dict:
        return self.to_record().to_dict()
