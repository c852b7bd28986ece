from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from simap.config import settings
from simap.routers import sessions, health
from simap.domain.errors import DomainError, NotFoundError, ValidationError, ConflictError
from simap.application.event_handlers import register_event_handlers

app = FastAPI(
    title="Social Identity Map API",
    description="Stores and serves survey session documents by session id",
    version=settings.VERSION,
)

# Register domain event handlers on startup
@app.on_event("startup")
async def startup_event():
    register_event_handlers()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)


# Domain error handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})

# Include routers
app.include_router(health.router, tags=["Health"])  # Health check endpoints first
app.include_router(sessions.router, tags=["Sessions"])

@app.get("/")
async def root():
    return {"message": "Social Identity Map server. Open /?session=<id> in the survey client; see /docs for the API"}
