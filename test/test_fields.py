"""
Tests for the field registry and item form
"""
import pytest

from inspection.defects import DefectContext
from inspection.fields import FIELD_KEYS, ItemForm, field_from_spoken


class TestFieldFromSpoken:
    @pytest.mark.parametrize("phrase,field", [
        ("name", "name"),
        ("the part name", "name"),
        ("Description", "description"),
        ("notes", "notes"),
        ("note", "notes"),
        ("inspector", "inspector"),
        ("date", "inspectionDate"),
        ("inspection date", "inspectionDate"),
    ])
    def test_resolves(self, phrase, field):
        assert field_from_spoken(phrase) == field

    @pytest.mark.parametrize("phrase", ["", "furnace", "severity"])
    def test_unknown(self, phrase):
        assert field_from_spoken(phrase) is None


class TestItemForm:
    def test_starts_empty(self):
        form = ItemForm()
        assert form.values() == {key: "" for key in FIELD_KEYS}

    def test_unknown_key_raises(self):
        form = ItemForm()
        with pytest.raises(KeyError):
            form.set("severity", "Red")

    def test_payload_omits_empty_date_and_defect(self):
        form = ItemForm(name="Panel A12", notes="ok")
        assert form.to_payload() == {
            "name": "Panel A12",
            "description": "",
            "notes": "ok",
            "inspector": "",
        }

    def test_payload_includes_date_and_defect(self):
        form = ItemForm(
            name="Panel A12",
            inspectionDate="2025-08-20",
            defect=DefectContext(code="DC-CRK", name="Crack", severity="Red"),
        )
        payload = form.to_payload()
        assert payload["inspectionDate"] == "2025-08-20"
        assert payload["defectCode"] == "DC-CRK"
        assert payload["defectName"] == "Crack"
        assert payload["severity"] == "Red"
