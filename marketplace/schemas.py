# marketplace/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List


class ChairOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    thumbnail: str
    price: int
    height: int
    width: int
    depth: int
    color: str
    features: str
    kind: str


class EstateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    thumbnail: str
    name: str
    description: str
    latitude: float
    longitude: float
    address: str
    rent: int
    door_height: int = Field(serialization_alias="doorHeight")
    door_width: int = Field(serialization_alias="doorWidth")
    features: str


class ChairSearchResponse(BaseModel):
    count: int
    chairs: List[ChairOut]


class ChairListResponse(BaseModel):
    chairs: List[ChairOut]


class EstateSearchResponse(BaseModel):
    count: int
    estates: List[EstateOut]


class EstateListResponse(BaseModel):
    estates: List[EstateOut]


class Coordinate(BaseModel):
    latitude: float
    longitude: float


class Coordinates(BaseModel):
    coordinates: List[Coordinate]


class EmailRequest(BaseModel):
    email: str


class InitializeResponse(BaseModel):
    language: str


# Range catalog, loaded from fixture/*_condition.json

class Range(BaseModel):
    id: int
    min: int
    max: int


class RangeCondition(BaseModel):
    prefix: str = ""
    suffix: str = ""
    ranges: List[Range]


class ListCondition(BaseModel):
    list: List[str]


class EstateSearchCondition(BaseModel):
    door_width: RangeCondition = Field(alias="doorWidth")
    door_height: RangeCondition = Field(alias="doorHeight")
    rent: RangeCondition
    feature: ListCondition


class ChairSearchCondition(BaseModel):
    width: RangeCondition
    height: RangeCondition
    depth: RangeCondition
    price: RangeCondition
    color: ListCondition
    feature: ListCondition
    kind: ListCondition
