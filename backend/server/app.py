"""FastAPI mock of the admin REST backend."""

import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from server.data import store
from server.routes import public, router

app = FastAPI(title="macc-admin mock backend")

# CORS for a browser dashboard on the dev port
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(public)
app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    """Errors carry `message`, which is what the dashboard shows."""
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    return JSONResponse(status_code=400, content={"message": f"{field}: {first.get('msg', 'Invalid request')}"})


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/uploads/{name}")
def get_upload(name: str):
    if name not in store.uploads:
        raise HTTPException(status_code=404, detail="Upload not found")
    content, media_type = store.uploads[name]
    return Response(content=content, media_type=media_type)


def run(host: str = "127.0.0.1", port: int = 8080, reload: bool = False) -> None:
    import uvicorn
    uvicorn.run("server.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run(port=int(os.environ.get("PORT", "8080")), reload=True)
