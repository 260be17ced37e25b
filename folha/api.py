# folha/api.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from folha.config import settings
from folha.fopag.router import router as fopag_router
from folha.folha13.router import router as folha13_router
from folha.logging_config import log

app = FastAPI(title=settings.APP_NAME, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(fopag_router)
app.include_router(folha13_router)


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.APP_NAME}


log.info(f"{settings.APP_NAME} iniciado. Tabela vigente: {settings.TABELA_VIGENTE}")
