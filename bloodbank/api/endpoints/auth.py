from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
import logging
from bloodbank.core.config import Settings, get_settings
from bloodbank.core.exceptions import BadRequestError, ForbiddenError, UnauthorizedError
from bloodbank.core.security import create_access_token, hash_password, verify_password, verify_token
from bloodbank.database.database import get_db
from bloodbank.models.user import User, UserRole, SELF_REGISTERABLE_ROLES
from bloodbank.schemas.user import UserCreate, UserLogin, TokenResponse
from bloodbank.services.utils import parse_object_id

logger = logging.getLogger(__name__)
router = APIRouter()

def _read_token(request: Request, settings: Settings) -> str:
    token = request.headers.get(settings.AUTH_HEADER_NAME)
    if not token:
        authorization = request.headers.get("Authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            token = credentials
    return token

async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> User:
    """Resolve the caller from the x-auth-token header."""
    token = _read_token(request, settings)
    if not token:
        raise UnauthorizedError("No token, authorization denied")

    claims = verify_token(token, settings)
    user_id = parse_object_id(claims["id"])
    user = db.query(User).filter(User.id == user_id).first() if user_id else None
    if not user:
        raise UnauthorizedError("Token is not valid")
    return user

def require_roles(*roles: UserRole):
    """Dependency factory: the caller's role must be one of roles."""
    allowed = frozenset(roles)

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise ForbiddenError("Forbidden: You do not have permission to perform this action")
        return current_user

    return role_checker

def register_user(db: Session, user_data: UserCreate, role: UserRole, settings: Settings) -> User:
    email = user_data.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise BadRequestError("User with this email already exists")
    if len(user_data.password) < settings.PASSWORD_MIN_LENGTH:
        raise BadRequestError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")

    user = User(
        email=email,
        hashed_password=hash_password(user_data.password, settings.BCRYPT_ROUNDS),
        role=role,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        contact_number=user_data.contact_number,
        address=user_data.address.model_dump(by_alias=True, exclude_none=True) if user_data.address else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Create an account and return a credential. Only donor, hospital and doctor can self-register."""
    role = user_data.role or UserRole.DONOR
    if role not in SELF_REGISTERABLE_ROLES:
        raise ForbiddenError(f"Role '{role.value}' cannot be self-assigned")

    user = register_user(db, user_data, role, settings)
    logger.info(f"User registered: {user.email} ({user.role.value})")

    token = create_access_token(user.id, user.role.value, settings)
    return TokenResponse(msg="User registered successfully", token=token)

@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Verify email and password and return a credential."""
    user = db.query(User).filter(User.email == credentials.email.strip().lower()).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Failed login attempt for {credentials.email}")
        raise BadRequestError("Invalid Credentials")

    token = create_access_token(user.id, user.role.value, settings)
    logger.info(f"User logged in: {user.email}")
    return TokenResponse(msg="Logged in successfully", token=token)
