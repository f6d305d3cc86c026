"""Provides application for development purposes."""

from sims.factory import create_web_app
from sims.services import datastore

app = create_web_app()
with app.app_context():
    datastore.create_all()
