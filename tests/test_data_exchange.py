import json
from datetime import datetime, timezone

import pytest

from app.schemas.member import Member
from app.schemas.template import CertificateTemplate, FieldDefinition, TextBox
from app.services.data_exchange import DataExchange


@pytest.fixture
def template():
    return CertificateTemplate(
        id="tpl-1",
        name="Workshop",
        image_url="data:image/png;base64,AAAA",
        text_boxes=[TextBox(id="b1", field_name="name", text="Recipient", width=300)],
        fields=[FieldDefinition(name="name", label="Full Name", required=True)],
    )


def test_export_blanks_image_and_uses_camel_case(template):
    members = [Member(id="m1", values={"name": "Alice"})]
    moment = datetime(2026, 5, 4, 12, 0, tzinfo=timezone.utc)
    document = json.loads(DataExchange.dumps(DataExchange.build(template, members, moment)))

    assert document["template"]["imageUrl"] == ""
    assert document["template"]["textBoxes"][0]["fieldName"] == "name"
    assert document["template"]["fields"][0]["label"] == "Full Name"
    assert document["members"] == [{"id": "m1", "name": "Alice"}]
    assert document["generatedAt"] == "2026-05-04T12:00:00Z"


def test_exported_document_parses_back(template):
    members = [Member(id="m1", values={"name": "Alice"}), Member(id="m2", values={})]
    raw = DataExchange.dumps(DataExchange.build(template, members)).encode()
    data = DataExchange.parse(raw)
    assert data.template.text_boxes == template.text_boxes
    assert DataExchange.members_of(data) == members


def test_invalid_json_is_rejected():
    with pytest.raises(ValueError, match="Invalid JSON file"):
        DataExchange.parse(b"{not json")


def test_wrong_shape_is_rejected():
    with pytest.raises(ValueError, match="Invalid certificate data"):
        DataExchange.parse(json.dumps({"members": []}).encode())


def test_duplicate_field_names_are_rejected():
    document = {"template": {"fields": [{"name": "a"}, {"name": "a"}]}, "members": []}
    with pytest.raises(ValueError):
        DataExchange.parse(json.dumps(document).encode())


def test_member_without_id_is_rejected():
    data = DataExchange.parse(json.dumps({"template": {}, "members": [{"name": "x"}]}).encode())
    with pytest.raises(ValueError):
        DataExchange.members_of(data)


def test_export_filename_is_dated():
    assert DataExchange.export_filename(datetime(2026, 1, 2).date()) == "certificate_data_2026-01-02.json"
