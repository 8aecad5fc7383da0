"""In-process stand-in for the Ollama runtime API.

Run standalone: uvicorn tests.mocks.fake_ollama:app --port 11434
"""

import json

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse

DEFAULT_PULL_RECORDS = [
    {"status": "pulling manifest"},
    {"status": "pulling 74701a8c35f6", "digest": "sha256:74701a8c35f6", "total": 1000, "completed": 0},
    {"status": "pulling 74701a8c35f6", "digest": "sha256:74701a8c35f6", "total": 1000, "completed": 420},
    {"status": "pulling 74701a8c35f6", "digest": "sha256:74701a8c35f6", "total": 1000, "completed": 1000},
    {"status": "verifying sha256 digest"},
    {"status": "writing manifest"},
    {"status": "success"},
]


def create_fake_ollama(installed: list[str] | None = None, running: bool = True) -> FastAPI:
    """Build a fresh fake runtime.

    Knobs live on ``app.state``: ``running`` gates every endpoint,
    ``pull_records`` is the NDJSON script, ``install_on_pull`` controls whether
    a pull actually registers the model, ``fail_delete`` names models whose
    deletion errors.
    """
    app = FastAPI(title="Fake Ollama")
    app.state.running = running
    app.state.installed = list(installed or [])
    app.state.pull_records = list(DEFAULT_PULL_RECORDS)
    app.state.install_on_pull = True
    app.state.fail_delete = set()
    app.state.pull_requests = []

    def _down() -> JSONResponse:
        return JSONResponse(status_code=503, content={"error": "server not running"})

    @app.get("/api/tags")
    async def tags():
        if not app.state.running:
            return _down()
        return {
            "models": [
                {"name": name, "model": name, "size": 1_300_000_000, "details": {"parameter_size": "1.2B"}}
                for name in app.state.installed
            ]
        }

    @app.get("/api/version")
    async def version():
        if not app.state.running:
            return _down()
        return {"version": "0.5.7"}

    @app.post("/api/pull")
    async def pull(request: Request):
        if not app.state.running:
            return _down()
        body = await request.json()
        name = body.get("name") or body.get("model")
        app.state.pull_requests.append(name)

        async def generate():
            yield "not json at all\n"
            for record in app.state.pull_records:
                yield json.dumps(record) + "\n"
            if app.state.install_on_pull and name not in app.state.installed:
                app.state.installed.append(name)

        return StreamingResponse(generate(), media_type="application/x-ndjson")

    @app.delete("/api/delete")
    async def delete(request: Request):
        if not app.state.running:
            return _down()
        body = await request.json()
        name = body.get("name") or body.get("model")
        if name in app.state.fail_delete:
            return JSONResponse(status_code=500, content={"error": f"failed to delete {name}"})
        if name not in app.state.installed:
            return JSONResponse(status_code=404, content={"error": f"model '{name}' not found"})
        app.state.installed.remove(name)
        return {}

    return app


app = create_fake_ollama(installed=["llama3.2:1b"])
