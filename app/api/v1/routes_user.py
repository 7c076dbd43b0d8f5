# app/api/v1/routes_user.py
"""
Admin-only user management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services import user_service

router = APIRouter(tags=["users"], dependencies=[Depends(require_admin)])


def _user(user) -> dict:
    return UserRead.model_validate(user).model_dump(mode="json")


@router.post("/create-user", status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    user = user_service.create_user(db, payload)
    return {
        "success": True,
        "status": "success",
        "message": "User created successfully",
        "data": _user(user),
    }


@router.get("/get-all-users")
def get_all_users(db: Session = Depends(get_db)):
    users = user_service.list_users(db)
    return {
        "success": True,
        "status": "success",
        "message": "Users found successfully!",
        "data": [_user(u) for u in users],
    }


@router.get("/get-user/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = user_service.get_user(db, user_id)
    return {
        "success": True,
        "status": "success",
        "message": "User found successfully!",
        "data": _user(user),
    }


@router.put("/update-user/{user_id}")
def update_user(user_id: int, patch: UserUpdate, db: Session = Depends(get_db)):
    user = user_service.update_user(db, user_id, patch)
    return {
        "success": True,
        "status": "success",
        "message": "User updated successfully",
        "data": _user(user),
    }


@router.delete("/delete-user/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user_service.delete_user(db, user_id)
    return {"success": True, "status": "success", "message": "User deleted successfully"}
