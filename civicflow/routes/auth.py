"""
Authentication endpoints - email/password accounts and the active profile.
"""

from fastapi import APIRouter, Depends, HTTPException, status
import logging

from civicflow.core.errors import AuthenticationError, DuplicateEmailError, PersistenceError, ValidationError
from civicflow.dependencies import get_accounts
from civicflow.models.base import BaseResponse
from civicflow.models.user import AuthResponse, LoginRequest, ProfileResponse, RegisterRequest
from civicflow.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, accounts: AccountService = Depends(get_accounts)):
    """
    Register a profile and sign it in.

    Rejected forms (empty fields, mismatched or short password, duplicate
    email) leave no trace.
    """
    try:
        profile, token = accounts.register(
            request.email,
            request.password,
            request.confirm_password,
            request.name,
            request.role,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Registration could not be saved: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return AuthResponse(
        success=True,
        message="Registration successful",
        user=ProfileResponse.from_profile(profile),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, accounts: AccountService = Depends(get_accounts)):
    try:
        profile, token = accounts.login(request.email, request.password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Active profile could not be saved: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return AuthResponse(
        success=True,
        message="Login successful",
        user=ProfileResponse.from_profile(profile),
        token=token,
    )


@router.post("/logout", response_model=BaseResponse)
async def logout(accounts: AccountService = Depends(get_accounts)):
    accounts.logout()
    return BaseResponse(message="Logged out")


@router.get("/me", response_model=ProfileResponse)
async def me(accounts: AccountService = Depends(get_accounts)):
    profile = accounts.current()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return ProfileResponse.from_profile(profile)


@router.get("/welcome")
async def welcome_status(accounts: AccountService = Depends(get_accounts)):
    return {"has_seen_welcome": accounts.has_seen_welcome()}


@router.post("/welcome", response_model=BaseResponse)
async def complete_welcome(accounts: AccountService = Depends(get_accounts)):
    """Record that onboarding has been completed on this device."""
    accounts.complete_welcome()
    return BaseResponse(message="Welcome screen completed")
