import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import ask as ask_router
from .middleware.logging import LoggingMiddleware
from .services.knowledge_index import KnowledgeIndexHandle


@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.getenv("KNOWLEDGE_PRELOAD", "true").lower() == "true":
        app.state.knowledge.preload_in_background()
    yield


app = FastAPI(title="ecm-assistant", version="1.0.0", lifespan=lifespan)

# The assistant form is embedded on third-party pages, so any origin may call /ask.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Length", "Content-Type"],
    max_age=86400,
)
app.add_middleware(LoggingMiddleware)

app.include_router(ask_router.router)

# Created at import so requests served before startup (tests without lifespan
# events) still find a handle; it loads on first use if not yet preloaded.
app.state.knowledge = KnowledgeIndexHandle()


@app.get("/__health")
def health():
    return {"ok": True, "knowledge_index_loaded": app.state.knowledge.loaded}


@app.get("/")
def root():
    return {"message": "ECM Assistant API is running. POST questions to /ask."}


if __name__ == "__main__":  # pragma: no cover - manual entry point
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3002")))
