from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from shopapi.auth.dependencies import get_auth_service, get_current_user, require_admin
from shopapi.core.config import Settings, get_settings
from shopapi.models.user import User
from shopapi.schemas.user import (
    AdminUpdateUserRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateMeRequest,
    UpdatePasswordRequest,
    UserResponse,
)
from shopapi.services.auth_service import AuthService, TokenGrant

AUTH_PREFIX = '/api/v1/auth'
TOKEN_COOKIE = 'token'
LOGOUT_COOKIE_SECONDS = 10

router = APIRouter(tags=['auth'])


def serialize_user(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode='json')


def token_response(grant: TokenGrant, settings: Settings) -> JSONResponse:
    response = JSONResponse({'success': True, 'token': grant.token})
    response.set_cookie(
        TOKEN_COOKIE,
        grant.token,
        expires=grant.cookie_expires,
        httponly=True,
        secure=settings.is_production,
    )
    return response


@router.post('/register')
def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    grant = service.register(name=payload.name, email=payload.email, password=payload.password)
    return token_response(grant, settings)


@router.post('/login')
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    grant = service.login(payload.email, payload.password)
    return token_response(grant, settings)


@router.get('/logout')
def logout(settings: Settings = Depends(get_settings)):
    response = JSONResponse({'success': True, 'data': {}})
    response.set_cookie(
        TOKEN_COOKIE,
        'none',
        expires=datetime.now(timezone.utc) + timedelta(seconds=LOGOUT_COOKIE_SECONDS),
        httponly=True,
        secure=settings.is_production,
    )
    return response


@router.get('/me')
def get_me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    user = service.get_me(current_user.id)
    return {'success': True, 'data': serialize_user(user)}


@router.put('/me')
def update_me(
    payload: UpdateMeRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    user = service.update_me(current_user.id, payload.model_dump(exclude_none=True))
    return {'success': True, 'data': serialize_user(user)}


@router.put('/updatepassword')
def update_password(
    payload: UpdatePasswordRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    grant = service.update_password(current_user.id, payload.current_password, payload.new_password)
    return token_response(grant, settings)


@router.post('/forgotpassword')
def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    reset_url_base = f"{str(request.base_url).rstrip('/')}{AUTH_PREFIX}/resetpassword"
    user = service.forgot_password(payload.email, reset_url_base)
    return {'success': True, 'data': serialize_user(user)}


@router.put('/resetpassword/{resettoken}')
def reset_password(
    resettoken: str,
    payload: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    grant = service.reset_password(resettoken, payload.password)
    return token_response(grant, settings)


@router.get('/users')
def list_users(
    _admin: User = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
):
    users = service.list_users()
    return {'success': True, 'count': len(users), 'data': [serialize_user(user) for user in users]}


@router.get('/users/{user_id}')
def get_user(
    user_id: int,
    _admin: User = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
):
    return {'success': True, 'data': serialize_user(service.get_user(user_id))}


@router.put('/users/{user_id}')
def update_user(
    user_id: int,
    payload: AdminUpdateUserRequest,
    _admin: User = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
):
    user = service.update_user(user_id, payload.model_dump(exclude_none=True))
    return {'success': True, 'data': serialize_user(user)}


@router.delete('/users/{user_id}')
def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
):
    service.delete_user(caller_id=admin.id, target_id=user_id)
    return {'success': True, 'data': f'Deleted user with id of: {user_id}'}
