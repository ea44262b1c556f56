# inspection/fields.py

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from inspection.defects import DefectContext

NAME = "name"
DESCRIPTION = "description"
NOTES = "notes"
INSPECTOR = "inspector"
INSPECTION_DATE = "inspectionDate"

FIELD_KEYS: Tuple[str, ...] = (NAME, DESCRIPTION, NOTES, INSPECTOR, INSPECTION_DATE)

# keyword -> field, checked in order
_SPOKEN_KEYWORDS = (
    ("name", NAME),
    ("description", DESCRIPTION),
    ("note", NOTES),
    ("inspector", INSPECTOR),
    ("date", INSPECTION_DATE),
)


def field_from_spoken(phrase: str) -> Optional[str]:
    """Resolve a spoken field reference ("text for the notes", "inspection date")."""
    w = (phrase or "").lower()
    for keyword, key in _SPOKEN_KEYWORDS:
        if keyword in w:
            return key
    return None


@dataclass
class ItemForm:
    """The item being recorded against a defect."""
    name: str = ""
    description: str = ""
    notes: str = ""
    inspector: str = ""
    inspectionDate: str = ""
    defect: DefectContext = field(default_factory=DefectContext)

    def set(self, key: str, value: str):
        _check_key(key)
        setattr(self, key, value)

    def values(self) -> Dict[str, str]:
        return {key: getattr(self, key) for key in FIELD_KEYS}

    def to_payload(self) -> dict:
        """Flat JSON body for the items route; empty date and defect parts are omitted."""
        payload = {
            "name": self.name,
            "description": self.description,
            "notes": self.notes,
            "inspector": self.inspector,
        }
        if self.inspectionDate:
            payload["inspectionDate"] = self.inspectionDate
        if self.defect.code:
            payload["defectCode"] = self.defect.code
        if self.defect.name:
            payload["defectName"] = self.defect.name
        if self.defect.severity:
            payload["severity"] = self.defect.severity
        return payload


def _check_key(key: str):
    if key not in FIELD_KEYS:
        raise KeyError(f"unknown field: {key!r}")
