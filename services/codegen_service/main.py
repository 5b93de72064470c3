from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .src.config import settings
from .src.routers import generate
from .otel import init_tracing

app = FastAPI(title="Codegen Relay API", version="1.0.0")

# Game clients call from arbitrary origins; preflight OPTIONS is answered here
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS", "POST"],
    allow_headers=["Content-Type"],
)
app.include_router(generate.router, prefix="/api")

tracer = init_tracing(app, service_name=settings.service_name, service_version="v1")

@app.get("/health")
def health():
    return {"status": "ok", "service": settings.service_name}
