from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """
    Base class for every MIS DTO and domain value object.

    Features:
        - from_attributes=True (ORM object conversion)
        - str_strip_whitespace=False (answers are stored verbatim)
        - populate_by_name=True
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )


class FrozenDTO(BaseDTO):
    """Immutable variant, used for values that never change after creation."""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        frozen=True
    )
