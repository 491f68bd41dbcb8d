import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from lexicards.db import verify_connection, close_client
from lexicards.images import get_image_settings
from lexicards.routers import cards_router, srs_router, seed_router, images_router, history_router
from lexicards.storage import get_storage_settings

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    storage_settings = get_storage_settings()
    storage_settings.validate()
    image_settings = get_image_settings()

    if storage_settings.backend == "cosmos":
        if verify_connection():
            print("✓ Connected to Cosmos DB")
        else:
            print("✗ Failed to connect to Cosmos DB - check configuration")
    elif storage_settings.backend == "file":
        print(f"✓ Storing cards under {storage_settings.path}")
    else:
        print("⚠ Using in-memory card storage - cards are lost on restart")

    if image_settings.is_configured():
        print(f"✓ Image generation enabled (model: {image_settings.model})")
    else:
        print("⚠ Image generation disabled (OPENAI_API_KEY not set)")

    yield

    # Shutdown
    if storage_settings.backend == "cosmos":
        close_client()
        print("✓ Cosmos DB connection closed")


app = FastAPI(
    title="Lexicards API",
    description="Vocabulary flashcards with spaced-repetition review",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(cards_router)
app.include_router(srs_router)
app.include_router(seed_router)
app.include_router(images_router)
app.include_router(history_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Lexicards API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/healthz",
            "cards": "/cards",
            "due": "/cards/due",
            "review": "/cards/{card_id}/review",
            "schedule": "/srs/next-review",
            "images": "/images/generate",
            "seed": "/seed",
            "history": "/history",
            "profile": "/profile/stats",
        },
    }


@app.get("/healthz")
async def healthz():
    """Health check endpoint."""
    return {"status": "healthy"}
