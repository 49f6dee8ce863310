"""
Teacher Dashboard Backend — Auth Route Handler
===============================================

What:  POST /auth/login — exchange the fixed credential pair for a bearer token.
How:   Delegates the credential check to the IdentityProvider on app.state,
       signs a token with the TokenService, returns it in the envelope and
       also sets it as an HTTP-only cookie.
"""

import logging

from fastapi import APIRouter, Request, Response

from dashboard.exceptions import AuthenticationError
from dashboard.schemas.auth import LoginData, LoginRequest, LoginUser
from dashboard.schemas.common import ApiResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=ApiResponse[LoginData],
    response_model_exclude_none=True,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Invalid username or password", "model": ErrorResponse},
    },
    summary="Log in with username and password",
)
async def login(body: LoginRequest, request: Request, response: Response) -> ApiResponse[LoginData]:
    """
    Validate credentials and issue a token for {username, role=Teacher, id=1}.

    Error responses (handled by global exception handlers):
        HTTP 400: missing username/password (RequestValidationError)
        HTTP 401: any other credential pair (AuthenticationError)
    """
    provider = request.app.state.identity_provider
    identity = await provider.authenticate(body.username, body.password)
    if identity is None:
        logger.warning("Failed login attempt for username=%s", body.username)
        raise AuthenticationError("Invalid username or password")

    token_service = request.app.state.token_service
    token = token_service.issue(identity)

    settings = request.app.state.settings
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=int(token_service.ttl.total_seconds()),
        httponly=True,
        samesite="lax",
    )

    logger.info("User %s logged in (role=%s)", identity.username, identity.role.value)
    return ApiResponse[LoginData](
        data=LoginData(
            token=token,
            user=LoginUser(username=identity.username, role=identity.role),
        ),
        message="Login successful",
    )
