import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lexdesk.database import get_db
from lexdesk.models import User, UserRole, Client
from lexdesk.auth.schemas import (
    RegisterRequest, LoginRequest, Identity, AuthResponse, UserResponse, VerifyResponse
)
from lexdesk.auth.utils import verify_password, get_password_hash, create_token_for_user
from lexdesk.auth.dependencies import get_current_identity
from lexdesk.responses import Envelope, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_payload(user: User) -> dict:
    return {"token": create_token_for_user(user), "user": user}


@router.post("/register", response_model=Envelope[AuthResponse], status_code=status.HTTP_201_CREATED)
def register_user(user_data: RegisterRequest, db: Session = Depends(get_db)):
    if not (user_data.name and user_data.email and user_data.password and user_data.role):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter all required fields"
        )

    # Check if user already exists
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists"
        )

    db_user = User(
        name=user_data.name,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        role=user_data.role,
        phone=user_data.phone,
    )
    db.add(db_user)
    db.flush()

    # Client self-registration gets its Client record in the same transaction,
    # or is linked to the record a lawyer already created for that email
    if user_data.role == UserRole.CLIENT:
        client = db.query(Client).filter(Client.email == user_data.email).first()
        if client is None:
            client = Client(
                name=user_data.name,
                email=user_data.email,
                mobile=user_data.phone,
                status=True,
                created_by=db_user.id,
            )
            db.add(client)
            db.flush()
        db_user.client_id = client.id

    db.commit()
    db.refresh(db_user)
    logger.info("Registered %s user %s", db_user.role.value, db_user.id)

    return envelope(_auth_payload(db_user), "User registered successfully")


@router.post("/login", response_model=Envelope[AuthResponse])
def login_user(credentials: LoginRequest, db: Session = Depends(get_db)):
    if not credentials.email or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter all fields"
        )

    user = db.query(User).filter(User.email == credentials.email).first()
    if not user:
        logger.info("Login attempt for unknown email")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")
    if not verify_password(credentials.password, user.password_hash):
        logger.info("Wrong password for user %s", user.id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    if user.role == UserRole.CLIENT:
        client = None
        if user.client_id:
            client = db.query(Client).filter(Client.id == user.client_id).first()
        if client is None:
            client = db.query(Client).filter(Client.email == user.email).first()
        if client is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Client account not found"
            )
        if not client.status:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Your account is currently inactive. Please contact support."
            )
        if user.client_id != client.id:
            user.client_id = client.id
            db.commit()
            db.refresh(user)

    return envelope(_auth_payload(user), "Login successful")


@router.get("/user", response_model=Envelope[UserResponse])
def get_current_user_info(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.id == identity.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return envelope(user)


@router.get("/verify", response_model=Envelope[VerifyResponse])
def verify_token(identity: Identity = Depends(get_current_identity)):
    return envelope({"valid": True, "user": identity})
