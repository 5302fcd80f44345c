from sqlalchemy import Column, String, Text

from spinecheck.database import Base


class KeyValue(Base):
    __tablename__ = "key_values"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(String, nullable=False)
