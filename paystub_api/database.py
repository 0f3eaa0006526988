from dotenv import load_dotenv

from core.db import fastapi_session

# Pick up a local .env during development
load_dotenv()


def get_db():
    yield from fastapi_session()
