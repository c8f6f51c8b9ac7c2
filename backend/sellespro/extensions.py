# Overview: Flask extension instances for database, migrations and application state.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .state import StateStore

db = SQLAlchemy()
migrate = Migrate()
state_store = StateStore()
