# headpress/models/option.py
from sqlalchemy import Column, Integer, String, Text

from headpress.db.base import Base


class Option(Base):
    """Site settings, one row per key."""
    __tablename__ = 'options'
    id = Column(Integer, primary_key=True)
    option_name = Column(String(191), unique=True, nullable=False)
    option_value = Column(Text)
    autoload = Column(String(3), nullable=False, server_default='yes')
