from fastapi import APIRouter
from app.api.endpoints import auth, contact, leads, diagnostic, notifications, realtime

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(contact.router, prefix="/contact", tags=["contact"])
api_router.include_router(leads.router, prefix="/admin/leads", tags=["leads"])
api_router.include_router(diagnostic.router, prefix="/workshop/diagnostic", tags=["diagnostic"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(realtime.router, prefix="/ws", tags=["realtime"])
