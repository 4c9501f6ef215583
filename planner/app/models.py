from sqlalchemy import Boolean, Column, String, Text

from .db import Base


class TaskRecord(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    date = Column(Text, nullable=False, index=True)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
