import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from routes.assessment_routes import router as assessment_router
from routes.classification_routes import router as classification_router
from routes.ledger_routes import router as ledger_router
from routes.scoring_routes import router as scoring_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# -----------------------------
app = FastAPI(
    title="Cognitive Assessment Backend",
    description="Scoring and trial engine for the memory, speed, attention and phonics games",
    version="1.0.0"
)

# --- REGISTER ROUTERS ---
app.include_router(scoring_router)
app.include_router(assessment_router)
app.include_router(ledger_router)
app.include_router(classification_router)

# --- CORS MIDDLEWARE ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins (update for production)
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# ROOT ENDPOINTS
@app.get("/")
def read_root():
    return {
        "message": "Welcome to the Cognitive Assessment Backend! Endpoints available for scoring, assessments and score ledger.",
        "docs": "/docs",
    }

@app.get("/health")
def health_check():
    return {"status": "healthy"}
