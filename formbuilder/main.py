import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formbuilder.api.forms import router as forms_router
from formbuilder.api.service import router as service_router
from formbuilder.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Form Builder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(service_router)
app.include_router(forms_router)
