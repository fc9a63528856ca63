from sqlalchemy import Column, Integer, String, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class Checkin(Base):
    __tablename__ = "checkins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(150), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD, local wall-clock date
    activity = Column(String(50), nullable=False)

    user = relationship("User", back_populates="checkins")

    __table_args__ = (
        UniqueConstraint("username", "date", "activity", name="uq_checkin_user_date_activity"),
        Index("idx_checkins_username", "username"),
        Index("idx_checkins_date", "date"),
    )
