
from __future__ import annotations
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional

from config.paths import list_bags
from core.errors import SinkCreationError
from recording.node import BagRecorderNode

app = FastAPI(title="Bag Recorder API")


class ControlRequest(BaseModel):
    enable_recording: bool
    source: Optional[str] = "http"


def bind(node: BagRecorderNode) -> FastAPI:
    app.state.node = node
    return app

def _node() -> BagRecorderNode:
    node = getattr(app.state, "node", None)
    if node is None:
        raise HTTPException(status_code=503, detail="recorder node not running")
    return node

@app.get("/status")
def status():
    return _node().controller.status()

@app.post("/bag_control", status_code=202)
def bag_control(req: ControlRequest):
    # goes through the control topic so it is ordered with every other sender
    delivered = _node().send_control(req.enable_recording, source=req.source)
    return {"delivered": delivered}

@app.post("/reset")
def reset():
    node = _node()
    try:
        node.controller.reset_session()
    except SinkCreationError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc), "path": exc.path})
    return node.controller.status()

@app.get("/bags")
def get_bags(limit: int = 50):
    root = _node().cfg.params.data_folder
    items = [{"name": p.name, "path": str(p)} for p in list_bags(root)[:limit]]
    return {"bags": items}
