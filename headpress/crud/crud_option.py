import json
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from headpress.models.option import Option


def serialize_value(value: Any) -> str:
    """Options are stored as text; lists and objects as JSON."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def get_option(db: Session, name: str) -> Optional[Option]:
    return db.query(Option).filter(Option.option_name == name).first()


def set_option(db: Session, name: str, value: Any, commit: bool = True) -> Option:
    option = get_option(db, name)
    if option is None:
        option = Option(option_name=name, autoload="yes")
        db.add(option)
    option.option_value = serialize_value(value)
    if commit:
        db.commit()
        db.refresh(option)
    return option


def set_options(db: Session, values: Dict[str, Any]) -> None:
    for name, value in values.items():
        set_option(db, name, value, commit=False)
    db.commit()
