# app/api/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.deps import get_datastore
from app.data.database import Datastore
from app.domain.schemas import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
def health(datastore: Datastore = Depends(get_datastore)):
    ready = datastore.check()
    return {
        "status": "healthy" if ready else "unhealthy",
        "database": {"state": datastore.state.value, "ready": ready},
        "timestamp": datetime.now(timezone.utc),
    }


@router.get("/")
def index():
    return {
        "message": "E-Commerce API Server",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "products": "/products",
            "auth": "/auth",
            "cart": "/cart",
            "orders": "/orders",
        },
    }
