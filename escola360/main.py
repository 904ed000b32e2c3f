from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from escola360.api import routes_auth, planning, library
from escola360.core.config import CORS_ORIGINS

app = FastAPI(title="Escola 360 Backend")

# CORS settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(routes_auth.router)
app.include_router(planning.router, prefix="/api", tags=["planning"])
app.include_router(library.router, prefix="/api/library", tags=["library"])


@app.get("/")
def read_root():
    return {"message": "Escola 360 API is running"}
