"""
Module: `extensions.py`.
Purpose: Creation and export of the Flask extension instances.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS

# Extensions are created here and initialised in the application factory.
# Committed posts keep their loaded columns so they can be serialised as-is.
db = SQLAlchemy(session_options={"expire_on_commit": False})
cors = CORS()
