from fastapi import APIRouter

from app import services

router = APIRouter()


@router.get("/")
async def root():
    return {
        "message": "Sego Command Agent",
        "status": "running",
        "version": "1.0.0",
        "interpreter": type(services.interpreter).__name__,
        "open_sessions": len(services.conversation_registry),
    }
