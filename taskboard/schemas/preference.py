from typing import Annotated, Any, Union
from pydantic import AllowInfNan, BaseModel, Field, Strict, StrictBool, StrictInt, StrictStr

# A finite float: NaN and Infinity have no JSON form to hand back
FiniteFloat = Annotated[float, Strict(), AllowInfNan(False)]

# Everything a preference may hold; null is not a value
PreferenceValue = Union[StrictBool, StrictInt, FiniteFloat, StrictStr, dict[str, Any], list[Any]]


class PreferenceItem(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: PreferenceValue


class PreferencesStore(BaseModel):
    """Either a single `key`/`value` pair or a `preferences` list."""
    key: str | None = Field(None, min_length=1, max_length=100)
    value: PreferenceValue | None = None
    preferences: list[PreferenceItem] | None = None


class PreferenceUpdate(BaseModel):
    value: PreferenceValue | None = None
    theme: str | None = None


class PreferenceEntry(BaseModel):
    key: str
    value: Any = None
