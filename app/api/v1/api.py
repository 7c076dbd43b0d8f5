from fastapi import APIRouter

from app.api.v1.routes_auth import router as auth_router
from app.api.v1.routes_task import router as task_router
from app.api.v1.routes_upload import router as upload_router
from app.api.v1.routes_user import router as user_router


api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth")
api_router.include_router(task_router)
api_router.include_router(user_router)
api_router.include_router(upload_router)
