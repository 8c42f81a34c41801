"""Flask extensions initialization."""

from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy


# Task table lives here
db = SQLAlchemy()

# Request/response schemas
ma = Marshmallow()
