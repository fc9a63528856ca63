from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from database import Base


class User(Base):
    __tablename__ = "users"

    username = Column(String(150), primary_key=True)
    password_digest = Column(String(255), nullable=False)  # opaque hex digest supplied by the client

    checkins = relationship(
        "Checkin",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
