import uuid

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text, UniqueConstraint, Uuid

from sessionlog.db.base import Base, UTCDateTime, utcnow


class UserLog(Base):
    """
    Session audit entry: one row per successful authentication.

    Written only by the session lifecycle manager (insert on login, a single
    logout_time update on logout) and removed only by an administrator.
    user_id is deliberately not a foreign key so history outlives the user.
    """

    __tablename__ = "user_logs"

    # Creation order; SQLite only autoincrements an INTEGER PRIMARY KEY
    seq = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    id = Column(Uuid(as_uuid=True), nullable=False, default=uuid.uuid4)

    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # role held at login time
    login_time = Column(UTCDateTime(), nullable=False, default=utcnow, index=True)
    logout_time = Column(UTCDateTime(), nullable=True)  # NULL = session open
    token = Column(Text, nullable=False)
    ip_address = Column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint("id", name="uq_user_logs_id"),
        # Lookup path of the logout update
        Index("ix_user_logs_open_lookup", "user_id", "token", "logout_time"),
    )

    @property
    def is_open(self) -> bool:
        return self.logout_time is None

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<UserLog(id={self.id}, user_id={self.user_id}, {state})>"
