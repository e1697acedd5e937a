from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "success": True,
        "name": "Gas Safety Alert API",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
