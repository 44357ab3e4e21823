"""specflow API - spec workflow service.

Serves the Specify -> Design -> Implement workflow over HTTP:
- Workflow lifecycle (create, list, load, delete)
- Phase generation as an NDJSON event stream
- Phase transitions, manual edits, document history
- Archiving and workflow deltas
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from specflow import __version__
from specflow.api.routes import specs
from specflow.config import build_engine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Initializing spec engine...")
    engine = build_engine()
    specs.init_engine(engine)

    recovered = engine.recover()
    if recovered.success and recovered.value:
        logger.warning(f"Recovered {recovered.value} interrupted archive(s)")

    workflows = engine.list_workflows()
    if workflows.success:
        logger.info(f"Loaded {len(workflows.value)} active workflows")

    logger.info("specflow API ready")
    yield
    logger.info("Shutting down specflow API")


app = FastAPI(
    title="specflow API",
    description="""
## Spec-driven workflow service

Walks a change request through three phases, each producing a validated
markdown document:

- **Specify**: requirements.md
- **Design**: design.md
- **Implement**: tasks.md

### Key Endpoints

- `POST /v1/specs` - Create a workflow
- `POST /v1/specs/{id}/generate` - Generate the current phase (NDJSON stream)
- `POST /v1/specs/{id}/proceed` - Advance to the next phase
- `POST /v1/specs/{id}/archive` - Archive a completed workflow
- `GET /v1/specs/delta?baseline=..&target=..` - Compare two workflows
""",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(specs.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "specflow API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "specs": "/v1/specs",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("specflow.api.main:app", host="0.0.0.0", port=8000, reload=False)
