# backend/wsgi.py
from cadeau import create_app

app = create_app()
