from __future__ import annotations
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from .builder import RealmBuilder
from .config_loader import load_realm
from .errors import ConfigurationError, NeptuneError, ResolutionError
from .fs_layout import build_layout
from .settings import Settings
from .supervisor import REBUILD_LOCK, RebuildLock
from . import __version__

class ActionResult(BaseModel):
    ok: bool
    detail: str | None = None
    data: dict | None = None

def create_app(settings: Settings, lock: RebuildLock | None = None) -> FastAPI:
    app = FastAPI(title="Neptune API", version=__version__)
    layout = build_layout(settings)
    builder = RealmBuilder(layout)
    rebuild_lock = lock or REBUILD_LOCK

    def _realm(realm_id: str):
        if not layout.realm_config(realm_id).is_file():
            raise HTTPException(status_code=404, detail="realm_not_found")
        try:
            return load_realm(layout, realm_id)
        except ConfigurationError as e:
            raise HTTPException(status_code=422, detail=str(e))

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/realms/{realm_id}")
    def get_realm(realm_id: str):
        return _realm(realm_id).model_dump()

    @app.get("/realms/{realm_id}/plan")
    def plan(realm_id: str):
        return builder.plan(_realm(realm_id)).to_dict()

    @app.post("/realms/{realm_id}/generate", response_model=ActionResult)
    def generate(realm_id: str):
        realm = _realm(realm_id)
        with rebuild_lock.attempt() as acquired:
            if not acquired:
                raise HTTPException(status_code=409, detail="rebuild_in_progress")
            try:
                out = builder.build(realm)
            except ResolutionError as e:
                raise HTTPException(status_code=422, detail=str(e))
            except (NeptuneError, OSError) as e:
                raise HTTPException(status_code=500, detail=str(e))
        return ActionResult(ok=True, detail="generated", data={"output": str(out)})

    return app
