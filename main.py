from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
import os
import logging

from db import init_db, get_db
from models.schemas_user import UserRegister, UserLogin, CurrentUser, TokenResponse, ChangePasswordRequest
from models.models_user import User
from utils.crud_user import get_user_by_email, create_student_user
from utils.auth_utils import hash_password, verify_password, create_token
from utils.deps import auth_user
from admissions.routes import routers as admissions_routers
from eligibility.routes import router as matches_router
from recommendation.routes import router as recommendations_router
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=logging.INFO)
logging.info("App starting with DATABASE_URL")

app = FastAPI(title="UniQualifyer API")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()

for router in admissions_routers:
    app.include_router(router)
app.include_router(matches_router)
app.include_router(recommendations_router)


@app.post("/auth/register", response_model=TokenResponse, status_code=201, tags=["auth"], summary="Register student")
def register(payload: UserRegister, db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        if get_user_by_email(db, payload.email):
            raise HTTPException(status_code=400, detail="Email already registered")
        user = create_student_user(
            db,
            email=payload.email,
            name=payload.name,
            password_hash=hash_password(payload.password),
        )
        logging.info(f"Registered student {user.email}")
        return TokenResponse(access_token=create_token(str(user.id), role=user.role))

@app.post("/auth/login", response_model=TokenResponse, tags=["auth"], summary="Login")
def login(payload: UserLogin, db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        user = get_user_by_email(db, payload.email)
        if not user or not verify_password(payload.password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return TokenResponse(access_token=create_token(str(user.id), role=user.role))

@app.get("/users/me", response_model=CurrentUser, tags=["users"], summary="Current user")
def me(current: CurrentUser = Depends(auth_user)):
    return current

@app.post("/users/me/password", status_code=204, tags=["users"], summary="Change my password")
def change_password(payload: ChangePasswordRequest, current: CurrentUser = Depends(auth_user), db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        user = db.get(User, current.id)
        if not verify_password(payload.current_password, user.password_hash):
            raise HTTPException(status_code=400, detail="Current password is incorrect")
        user.password_hash = hash_password(payload.new_password)


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "ok"}
