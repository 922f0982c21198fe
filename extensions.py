from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Shared extension instances; bound to the app inside create_app().

db = SQLAlchemy()
migrate = Migrate()
