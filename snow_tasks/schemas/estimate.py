"""Estimate request schema."""

from marshmallow import EXCLUDE, Schema, fields


class EstimateQuerySchema(Schema):
    """Query parameters for a clearing estimate."""

    class Meta:
        unknown = EXCLUDE

    area = fields.Int(required=True)
    wants_salt = fields.Bool(data_key="wantsSalt", load_default=False)
    has_equipment = fields.Bool(data_key="hasEquipment", load_default=False)


class AccessSchema(Schema):
    """Body of a site passphrase check."""

    class Meta:
        unknown = EXCLUDE

    password = fields.Str(load_default="")
