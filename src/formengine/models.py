from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FormConfigModel(Base):
    __tablename__ = "form_configs"

    form_id = Column(String, primary_key=True)
    form_name = Column(String)
    form_description = Column(Text)
    form_config = Column(Text)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)
