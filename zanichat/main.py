# Run from project root: uvicorn zanichat.main:app --reload

import logging

from fastapi import FastAPI

from zanichat.api.routes import router

logging.basicConfig(level=logging.INFO)


app = FastAPI(title="zanichat")
app.include_router(router)
