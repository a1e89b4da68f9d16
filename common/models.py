"""
Common base document model for the Friend Locator project.

Documents are plain dataclasses whose field names are the snake_case
keys stored in the document store. ``id`` is the document id and is
not written into the document body.
"""
import enum
from dataclasses import dataclass, fields


@dataclass
class Document:
    id: str = ''

    collection = None

    def to_dict(self):
        data = {}
        for f in fields(self):
            if f.name == 'id':
                continue
            value = getattr(self, f.name)
            if isinstance(value, enum.Enum):
                value = value.value
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, doc_id, data):
        known = {f.name for f in fields(cls)} - {'id'}
        return cls(id=doc_id, **{k: v for k, v in (data or {}).items() if k in known})

    @classmethod
    def from_snapshot(cls, snapshot):
        if not snapshot.exists:
            return None
        return cls.from_dict(snapshot.id, snapshot.data)
