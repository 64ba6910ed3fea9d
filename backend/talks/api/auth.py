from fastapi import APIRouter, Depends, HTTPException, Response

from talks.api.deps import get_services
from talks.app_state import Services
from talks.models import LoginRequest, SignupRequest, User, UserUpdate

router = APIRouter()


@router.post("/auth/login", response_model=User)
def login(body: LoginRequest, services: Services = Depends(get_services)):
    return services.session.login(body.identifier, body.password)


@router.post("/auth/signup", response_model=User, status_code=201)
def signup(body: SignupRequest, services: Services = Depends(get_services)):
    return services.session.register(body)


@router.post("/auth/logout", status_code=204)
def logout(services: Services = Depends(get_services)):
    services.session.logout()
    return Response(status_code=204)


@router.get("/auth/me", response_model=User)
def me(services: Services = Depends(get_services)):
    user = services.session.current()
    if not user:
        raise HTTPException(status_code=401, detail="Not logged in")
    return user


@router.put("/auth/me", response_model=User)
def update_profile(body: UserUpdate, services: Services = Depends(get_services)):
    return services.session.update_profile(body)
