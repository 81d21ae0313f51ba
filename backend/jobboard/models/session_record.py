from sqlalchemy import Column, String, Integer, ForeignKey

from jobboard.database import Base
from jobboard.database_types import UTCDateTime


class SessionRecord(Base):
    """
    Long-lived session (refresh) token.

    At most one live record per user: the unique ``user_id`` backs the
    replace-not-append rule in ``services.sessions.create_session``.
    There is intentionally no back-reference on ``User``.
    """
    __tablename__ = "session_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    issued_at = Column(UTCDateTime, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False)

    def is_expired(self, now) -> bool:
        return now > self.expires_at
