"""Task-related Marshmallow schemas."""

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_dump, pre_load, validate


def _clean_text(data: Any, text_keys: tuple[str, ...]) -> Any:
    """Trim text fields and turn bare numbers into strings.

    Clients often send phone numbers as JSON numbers.
    """
    if not isinstance(data, dict):
        return data
    cleaned = dict(data)
    for key in text_keys:
        value = cleaned.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            value = str(value)
        if isinstance(value, str):
            cleaned[key] = value.strip()
    return cleaned


class TaskSchema(Schema):
    """Public view of a task. Never exposes the claimant's phone."""

    id = fields.Str(dump_only=True)
    name = fields.Str()
    phone = fields.Str()
    address = fields.Str()
    area = fields.Int()
    price = fields.Int()
    wantsSalt = fields.Bool(attribute="wants_salt")
    hasEquipment = fields.Bool(attribute="has_equipment")
    description = fields.Str()
    createdAt = fields.Int(attribute="created_at", dump_only=True)
    status = fields.Str(dump_only=True)


class OwnerTaskSchema(TaskSchema):
    """Owner view: adds the claimant's phone while the task is taken."""

    takenByPhone = fields.Str(attribute="taken_by_phone", dump_only=True)

    @post_dump
    def drop_empty_claimant(self, data: dict, **kwargs) -> dict:
        if data.get("takenByPhone") is None:
            data.pop("takenByPhone", None)
        return data


class TaskCreateSchema(Schema):
    """Schema for task creation validation."""

    class Meta:
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    phone = fields.Str(required=True, validate=validate.Length(min=1, max=64))
    address = fields.Str(required=True, validate=validate.Length(min=1, max=500))
    area = fields.Int(required=True, validate=validate.Range(min=1))
    price = fields.Int(required=True, validate=validate.Range(min=1))
    wants_salt = fields.Bool(data_key="wantsSalt", load_default=False)
    has_equipment = fields.Bool(data_key="hasEquipment", load_default=False)
    description = fields.Str(load_default="", validate=validate.Length(max=5000))
    # Empty string is a valid password; only a missing one is rejected
    owner_password = fields.Str(required=True, data_key="ownerPassword")

    @pre_load
    def clean(self, data: Any, **kwargs) -> Any:
        data = _clean_text(data, ("name", "phone", "address", "description", "ownerPassword"))
        if isinstance(data, dict):
            for key in ("wantsSalt", "hasEquipment", "description"):
                if data.get(key) is None:
                    data.pop(key, None)
        return data


class ClaimSchema(Schema):
    """Schema for claiming a task."""

    class Meta:
        unknown = EXCLUDE

    phone = fields.Str(required=True, validate=validate.Length(min=1, max=64))

    @pre_load
    def clean(self, data: Any, **kwargs) -> Any:
        return _clean_text(data, ("phone",))


class OwnerCredentialsSchema(Schema):
    """Phone and password identifying a task's owner."""

    class Meta:
        unknown = EXCLUDE

    phone = fields.Str(required=True, validate=validate.Length(min=1, max=64))
    password = fields.Str(required=True, validate=validate.Length(min=1))

    @pre_load
    def clean(self, data: Any, **kwargs) -> Any:
        return _clean_text(data, ("phone", "password"))


class TaskCreatedSchema(Schema):
    """Schema for the creation response."""

    id = fields.Str()
    createdAt = fields.Int(attribute="created_at")
    status = fields.Str()
