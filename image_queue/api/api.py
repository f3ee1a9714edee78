# image_queue/api/api.py
from fastapi import APIRouter

from image_queue.api.endpoints import admin, auth, bank, invite, notifications, queue, upload, users

api_router = APIRouter()

# Media upload
api_router.include_router(upload.router, prefix="/upload", tags=["upload"])

# Publish queue and bank, backed by the remote record store
api_router.include_router(queue.router, prefix="/airtable/queue", tags=["queue"])
api_router.include_router(bank.router, prefix="/airtable/bank", tags=["bank"])
api_router.include_router(users.router, prefix="/airtable/user", tags=["users"])

# Accounts
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(invite.router, prefix="/invite", tags=["invite"])

api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
