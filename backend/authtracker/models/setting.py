from sqlalchemy import Column, String, Text
from authtracker.database import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(200), primary_key=True)
    value = Column(Text)
