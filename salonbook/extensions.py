from flask_sqlalchemy import SQLAlchemy

from salonbook.models import Base

db = SQLAlchemy(model_class=Base)
