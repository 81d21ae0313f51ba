from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Enum as SQLEnum
import enum

from jobboard.database import Base
from jobboard.database_types import UTCDateTime, utcnow


class UserRole(str, enum.Enum):
    """User role for role-based access control (RBAC)."""
    CANDIDATE = "CANDIDATE"  # Job seeker - applies to jobs, sees own applications
    RECRUITER = "RECRUITER"  # Manages job postings on behalf of one company
    EMPLOYER = "EMPLOYER"  # Owns exactly one company, appoints recruiters
    ADMIN = "ADMIN"  # Platform administrator


COMPANY_ROLES = (UserRole.EMPLOYER, UserRole.RECRUITER)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    # Always stored lower-cased so the unique index is case-insensitive
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(16), nullable=True)

    # Role-based access control
    role = Column(
        SQLEnum(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.CANDIDATE,
        index=True
    )

    # Soft deactivation (account recovery brings it back)
    deleted = Column(Boolean, nullable=False, default=False)

    # Credentials issued at or before this instant are rejected
    revocation_timestamp = Column(UTCDateTime, nullable=True)

    # Recovery of deactivated accounts
    recovery_token = Column(String, nullable=True, unique=True, index=True)
    recovery_token_expires_at = Column(UTCDateTime, nullable=True)

    # Employers and recruiters belong to exactly one company
    company_id = Column(
        Integer,
        ForeignKey("companies.id", use_alter=True, name="fk_users_company_id"),
        nullable=True,
        index=True
    )

    # Timestamps
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    def has_valid_recovery_token(self, now) -> bool:
        if not self.recovery_token or not self.recovery_token_expires_at:
            return False
        return now < self.recovery_token_expires_at
