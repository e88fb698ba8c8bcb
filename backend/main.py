import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.clusters import handle_clusters, handle_zoom
from api.schemas import ClustersRequest, ZoomRequest
from telemetry.singleton import get_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="gymmap")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/clusters")
def clusters(body: ClustersRequest):
    return handle_clusters(body)


@app.post("/clusters/zoom")
def clusters_zoom(body: ZoomRequest):
    return handle_zoom(body)


@app.get("/telemetry/summary")
def telemetry_summary(endpoint: str | None = None, since_ms: int | None = None):
    store = get_store()
    if store is None:
        return {"enabled": False, "rows": []}
    return {
        "enabled": True,
        "rows": store.summary(endpoint=endpoint, since_ms=since_ms),
    }
