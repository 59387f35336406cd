"""
User service for registration, credential checks and OAuth account linking
Handles all user-related business logic
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timezone
from typing import Optional
import logging

from app.models.user import User
from app.models.facility import Facility
from app.schemas.user import RegistrationForm, LoginForm, Role
from app.auth.auth_handler import AuthHandler
from app.auth.oauth import OAuthProfile
from app.utils.error_handler import AppError, ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

class UserService:
    """Service for user management operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    async def register_user(self, form: RegistrationForm) -> User:
        """Create a Doctor/Nurse account, creating the facility if it is new"""
        try:
            existing_user = self.db.query(User).filter(User.email == form.email).first()
            if existing_user:
                raise ConflictError("User with this email already exists")

            facility = await self.get_or_create_facility(
                name=form.facility_name,
                address=form.facility_address,
                phone=form.facility_phone,
                email=form.facility_email,
            )

            db_user = User(
                name=form.name,
                email=form.email,
                hashed_password=self.auth_handler.get_password_hash(form.password),
                role=form.role,
                facility_id=facility.id,
                license_number=form.license_number,
                specialization=form.specialization,
            )
            self.db.add(db_user)
            try:
                self.db.commit()
            except IntegrityError:
                # Lost a race with a concurrent registration for the same email
                self.db.rollback()
                raise ConflictError("User with this email already exists")
            self.db.refresh(db_user)

            logger.info(f"Registered {db_user.role} {db_user.email} at facility '{facility.name}'")
            return db_user

        except AppError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to register user: {e}")
            raise DatabaseError(f"Failed to register user: {str(e)}", e)

    async def get_or_create_facility(
        self,
        name: str,
        address: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None
    ) -> Facility:
        """Facilities are deduplicated by name"""
        facility = self.db.query(Facility).filter(Facility.name == name).first()
        if facility:
            return facility

        facility = Facility(name=name, address=address, phone=phone, email=email)
        self.db.add(facility)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created it between our read and write
            self.db.rollback()
            return self.db.query(Facility).filter(Facility.name == name).one()
        self.db.refresh(facility)
        logger.info(f"Created facility: {facility.name}")
        return facility

    async def authenticate_user(self, login_data: LoginForm) -> Optional[User]:
        """Return the user when the credentials match, otherwise None"""
        try:
            user = await self.get_user_by_email(login_data.email)

            if not user:
                logger.warning(f"Login attempt with non-existent user: {login_data.email}")
                return None

            if not self.auth_handler.verify_password(login_data.password, user.hashed_password):
                logger.warning(f"Failed login attempt for user: {user.email}")
                return None

            user.last_login = datetime.now(timezone.utc)
            self.db.commit()

            logger.info(f"Successful login for user: {user.email}")
            return user

        except Exception as e:
            self.db.rollback()
            logger.error(f"Authentication error: {e}")
            raise DatabaseError(f"Authentication failed: {str(e)}", e)

    async def link_oauth_account(self, profile: OAuthProfile) -> User:
        """Find the user for an OAuth identity, creating a Doctor on first sign-in"""
        try:
            user = await self.get_user_by_email(profile.email)
            if user:
                if not user.oauth_provider:
                    user.oauth_provider = profile.provider
                    user.oauth_id = profile.subject
                    self.db.commit()
                    self.db.refresh(user)
                    logger.info(f"Linked {profile.provider} account to user: {user.email}")
                return user

            user = User(
                name=profile.name,
                email=profile.email,
                role=Role.DOCTOR.value,
                oauth_provider=profile.provider,
                oauth_id=profile.subject,
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"Created user from {profile.provider} sign-in: {user.email}")
            return user

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to link OAuth account for {profile.email}: {e}")
            raise DatabaseError(f"Failed to link OAuth account: {str(e)}", e)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self.db.query(User).filter(User.email == email.lower()).first()

    async def update_role(self, user_id: int, role: Role) -> User:
        """Change a user's role"""
        try:
            user = await self.get_user_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")

            user.role = role.value
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"Changed role of {user.email} to {user.role}")
            return user

        except AppError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update role for user {user_id}: {e}")
            raise DatabaseError(f"Failed to update user role: {str(e)}", e)

    async def get_users_paginated(self, page: int = 1, page_size: int = 10, role: Optional[Role] = None) -> tuple[list[User], int]:
        """Get paginated list of users"""
        try:
            query = self.db.query(User)
            if role:
                query = query.filter(User.role == role.value)

            total = query.count()

            offset = (page - 1) * page_size
            users = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(page_size).all()

            return users, total

        except Exception as e:
            logger.error(f"Failed to get users: {e}")
            raise DatabaseError(f"Failed to retrieve users: {str(e)}", e)
