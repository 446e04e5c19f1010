"""
Authentication router — credential + Google sign-in, JWT cookie, email verification.

Endpoints:
    POST /auth/login                 → email/password sign-in, sets JWT cookie
    GET  /auth/login/google          → redirect to Google's consent screen
    GET  /auth/callback/google       → handle OAuth callback, create/login user
    GET  /auth/logout                → clear JWT cookie
    POST /auth/verify-email          → consume a verification token
    POST /auth/resend-verification   → email a fresh verification token
"""

from typing import Optional

from datetime import datetime, timedelta, timezone

from authlib.integrations.base_client import OAuthError
from authlib.integrations.starlette_client import OAuth
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.errors import Forbidden, InvalidInput, Unauthenticated
from app.models.user import User
from app.schemas.user import ResendVerificationIn, Token, UserLogin, VerifyEmailIn
from app.services import accounts

router = APIRouter(prefix="/auth", tags=["auth"])

COOKIE_KEY = "access_token"

# ═══════════════════════════════════════════════════════════════
#  OAuth client setup
# ═══════════════════════════════════════════════════════════════

oauth = OAuth()

oauth.register(
    name="google",
    client_id=settings.GOOGLE_CLIENT_ID,
    client_secret=settings.GOOGLE_CLIENT_SECRET,
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
)


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

def create_access_token(data: dict) -> str:
    """Create a signed JWT with an expiry claim."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _set_auth_cookie(response: Response, token: str) -> Response:
    """Attach the JWT cookie to a response."""
    response.set_cookie(
        key=COOKIE_KEY,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    return response


def _token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_KEY)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Extract the JWT from the cookie (or a Bearer header), decode it, and
    return the User. Returns None when no valid token is present.
    """
    token = _token_from_request(request)
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id: int = int(payload.get("sub", 0))
        if not user_id:
            return None
    except (JWTError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def require_user(current_user: Optional[User] = Depends(get_current_user)) -> User:
    if current_user is None:
        raise Unauthenticated()
    return current_user


async def require_admin(current_user: User = Depends(require_user)) -> User:
    if not current_user.is_admin:
        raise Forbidden("Administrator access required")
    return current_user


# ═══════════════════════════════════════════════════════════════
#  Credentials
# ═══════════════════════════════════════════════════════════════

@router.post("/login", response_model=Token)
async def login(
    payload: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Check email/password and set the JWT cookie."""
    user = await accounts.authenticate(db, payload.email, payload.password)
    token = create_access_token({"sub": str(user.id)})
    _set_auth_cookie(response, token)
    return Token(access_token=token)


@router.get("/logout")
async def logout():
    """Clear the auth cookie and redirect to the landing page."""
    response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(key=COOKIE_KEY)
    return response


# ═══════════════════════════════════════════════════════════════
#  Google OAuth flow
# ═══════════════════════════════════════════════════════════════

@router.get("/login/google")
async def google_login(request: Request):
    """Redirect the user to Google's OAuth consent screen."""
    client = oauth.create_client("google")
    redirect_uri = request.url_for("google_callback")
    return await client.authorize_redirect(request, str(redirect_uri))


@router.get("/callback/google")
async def google_callback(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Handle the OAuth callback — find or create the user, set JWT cookie."""
    try:
        client = oauth.create_client("google")
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        raise Unauthenticated(f"Authentication failed: {e.error}")

    userinfo = token.get("userinfo") or {}
    email = userinfo.get("email")
    oauth_id = userinfo.get("sub")
    if not email or not oauth_id:
        raise InvalidInput("Could not retrieve your email from the provider")

    user = await accounts.find_or_create_oauth_user(
        db,
        provider="google",
        oauth_id=oauth_id,
        email=email,
        name=userinfo.get("name"),
        picture=userinfo.get("picture"),
    )

    response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    return _set_auth_cookie(response, create_access_token({"sub": str(user.id)}))


# ═══════════════════════════════════════════════════════════════
#  Email verification
# ═══════════════════════════════════════════════════════════════

@router.post("/verify-email")
async def verify_email(payload: VerifyEmailIn, db: AsyncSession = Depends(get_db)):
    await accounts.verify_email(db, payload.token)
    return {"message": "Email verified successfully"}


@router.post("/resend-verification")
async def resend_verification(payload: ResendVerificationIn, db: AsyncSession = Depends(get_db)):
    await accounts.resend_verification(db, payload.email)
    return {"message": "Verification email sent successfully"}
