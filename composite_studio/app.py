from __future__ import annotations
import asyncio
import logging
import os
import threading
import time
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse, Response

from .config import Settings, configure_logging
from .errors import EmptyInputError, ExportFailure, InvalidPhase
from .models import GenerateReq
from .page import render_page, validate_surfaces
from .preview import PreviewRenderer, ResourceRegistry, Scheduler
from .selection import SelectionManager
from .storage import ScratchStore, sanitize_filename
from .studio import Studio

log = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, studio: Studio | None = None,
               scheduler: Scheduler | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    # Fail at startup, not on first click, if the page lost an element
    page = validate_surfaces(render_page(settings.default_duration, settings.default_layout))
    store = ScratchStore(settings.scratch_dir)
    store.prune()
    if studio is None:
        renderer = PreviewRenderer(ResourceRegistry(), scheduler=scheduler, max_px=settings.preview_max_px)
        studio = Studio(SelectionManager(renderer), settings=settings)

    app = FastAPI(title="Composite Studio", default_response_class=JSONResponse)
    app.state.settings = settings
    app.state.studio = studio
    app.state.store = store
    # save, select and prune form one unit: the kept batch always backs the live generation
    selection_lock = threading.Lock()

    def replace_selection(uploads):
        with selection_lock:
            batch = store.new_batch()
            raws = [store.save(batch, name, ct, data) for name, ct, data in uploads]
            log.info("received %d upload(s) into batch %s", len(raws), batch)
            studio.select(raws)
            store.prune(keep=batch)
            return studio.view()

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    def root():
        return page

    @app.get("/favicon.ico", include_in_schema=False)
    def favicon():
        return Response(status_code=204)

    @app.get("/health")
    def health():
        return {"ok": True, "time": time.time()}

    @app.get("/selection")
    def api_get_selection():
        return studio.view()

    @app.post("/selection")
    async def api_replace_selection(files: Optional[List[UploadFile]] = File(default=None)):
        uploads = []
        for f in files or []:
            uploads.append((f.filename or "untitled", f.content_type, await f.read()))
        return await asyncio.to_thread(replace_selection, uploads)

    @app.delete("/selection")
    def api_clear_selection():
        with selection_lock:
            studio.clear()
            store.prune()
            return studio.view()

    @app.get("/media/{token}")
    def api_media(token: str):
        raw = studio.manager.registry.resolve(token)
        if raw is None or not os.path.isfile(raw.path):
            raise HTTPException(404, "Preview reference was revoked")
        return FileResponse(raw.path, media_type=raw.content_type or "application/octet-stream")

    @app.post("/script")
    def api_generate(req: Optional[GenerateReq] = None):
        req = req or GenerateReq()
        try:
            script = studio.generate(duration=req.duration, layout=req.layout)
        except EmptyInputError as e:
            raise HTTPException(400, str(e))
        return {
            "script": script.text,
            "filenames": script.filenames,
            "generation": script.generation,
            "copy_enabled": studio.copy_enabled,
        }

    @app.get("/script")
    def api_get_script():
        if studio.script is None:
            raise HTTPException(404, "No script generated")
        return {"script": studio.script.text, "filenames": studio.script.filenames,
                "generation": studio.script.generation}

    @app.get("/script/download")
    def api_download_script():
        script = studio.script
        if script is None:
            raise HTTPException(404, "No script generated")
        name = sanitize_filename(script.params.script_filename)
        return PlainTextResponse(
            script.text,
            media_type="text/x-python",
            headers={"Content-Disposition": f'attachment; filename="{name}"'},
        )

    @app.post("/script/copy")
    def api_copy_script():
        try:
            via = studio.copy()
        except InvalidPhase as e:
            raise HTTPException(409, str(e))
        except ExportFailure as e:
            raise HTTPException(502, str(e))
        return {"ok": True, "via": via, "message": "Python script copied to clipboard!"}

    return app


def main() -> None:
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
