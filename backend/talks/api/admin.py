from fastapi import APIRouter, Depends, HTTPException, Response

from talks.api.deps import get_services
from talks.app_state import Services
from talks.models import Activity, User, UserCreate, UserUpdate

router = APIRouter()


def admin_services(services: Services = Depends(get_services)) -> Services:
    services.session.require_admin()
    return services


@router.get("/admin/users", response_model=list[User])
def list_users(services: Services = Depends(admin_services)):
    return services.users.all()


@router.post("/admin/users", response_model=User, status_code=201)
def create_user(body: UserCreate, services: Services = Depends(admin_services)):
    return services.users.create_user(body)


@router.put("/admin/users/{user_id}", response_model=User)
def update_user(user_id: str, body: UserUpdate, services: Services = Depends(admin_services)):
    return services.users.update_user(user_id, body)


@router.delete("/admin/users/{user_id}", status_code=204)
def delete_user(user_id: str, services: Services = Depends(admin_services)):
    services.users.delete_user(user_id)
    return Response(status_code=204)


@router.get("/admin/users/{user_id}/activities", response_model=list[Activity])
def user_activities(user_id: str, services: Services = Depends(admin_services)):
    if not services.users.get(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return services.users.get_activities(user_id)
