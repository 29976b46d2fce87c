# backend/src/honeyward/api/auth.py
#
# JWT authentication for the admin dashboard (reporting endpoints only).
# Single admin account taken from settings. Every login attempt is
# itself tracked as activity so the login funnel report has data, and the
# submitted username is run through the classifier like any other input.

from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, HTTPException, Request, status, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from honeyward.config import settings
from honeyward.api.deps import client_context, get_classifier, get_recorder, session_id

router        = APIRouter(prefix="/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class Token(BaseModel):
    access_token: str
    token_type:   str
    username:     str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def create_access_token(username: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    return jwt.encode(
        {"sub": username, "exp": expire},
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def verify_token(token: str = Depends(oauth2_scheme)) -> str:
    try:
        payload  = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        username = payload.get("sub")
        if not username:
            raise HTTPException(status_code=401, detail="Invalid token")
        return username
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/login", response_model=Token)
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends()):
    recorder = get_recorder(request)
    context  = client_context(request)
    session  = session_id(request)

    recorder.track_activity(
        "login_attempt",
        session_id= session,
        context=    context,
        page=       "/auth/login",
        data=       {"username": form_data.username, "password_length": len(form_data.password)},
    )

    result = get_classifier(request).classify(form_data.username, "login_username")
    if result.matched:
        recorder.record_classification(result, context, session)

    if (
        form_data.username != settings.admin_username or
        form_data.password != settings.admin_password
    ):
        recorder.track_activity(
            "login_failed",
            session_id= session,
            context=    context,
            page=       "/auth/login",
            severity=   "medium",
            data=       {"username": form_data.username, "reason": "Invalid credentials"},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    recorder.track_activity(
        "login_successful",
        session_id= session,
        context=    context,
        page=       "/auth/login",
        data=       {"username": form_data.username},
    )
    token = create_access_token(form_data.username)
    return Token(
        access_token=token,
        token_type="bearer",
        username=form_data.username,
    )
