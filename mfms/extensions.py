from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_mail import Mail

db = SQLAlchemy()
migrate = Migrate()

# Transport behind the default notifier (see services/email.py).
mail = Mail()
