"""Pydantic models for request bodies and response shapes.

Listings and reviews are open-ended documents: the models name the fields
every normalized payload is guaranteed to carry but leave their values
untyped, since stored data is returned as-is (extra="allow").
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class Listing(BaseModel):
    """Normalized listing as returned to clients (defaults already applied)."""

    model_config = ConfigDict(extra="allow")

    id: Any = None
    title: Any = "Untitled Property"
    location: Any = "Unknown Location"
    description: Any = ""
    roomType: Any = "single"
    images: Any = Field(default_factory=list)
    amenities: Any = Field(default_factory=list)
    aiInsights: Any = Field(default_factory=list)
    coordinates: Any = Field(default_factory=lambda: {"lat": 0, "lng": 0})


class ListingFilters(BaseModel):
    """Optional search filters for GET /api/properties (all off by default)."""

    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_rating: Optional[float] = None
    room_types: List[str] = Field(default_factory=list)
    has_mess: Optional[bool] = None
    verified_only: bool = False
    college: Optional[str] = None


class CreatedResponse(BaseModel):
    message: str
    id: Optional[str] = None
    ids: Optional[List[str]] = None


class MessageResponse(BaseModel):
    message: str


class PropertyRef(BaseModel):
    """Listing snapshot sent with POST /api/favorites (only id is required)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    title: Optional[str] = None
    location: Optional[str] = None
    price: Optional[float] = None
    rating: Optional[float] = None
    images: List[str] = Field(default_factory=list)


class FavoriteRequest(BaseModel):
    property: Optional[PropertyRef] = None


class InsightRequest(BaseModel):
    property: Optional[Dict[str, Any]] = None


class InsightResponse(BaseModel):
    insights: List[str]


class ProfileUpdate(BaseModel):
    """Merge-patch body: only keys actually sent are written (explicit null included)."""

    displayName: Optional[str] = None
    college: Optional[str] = None
    bio: Optional[str] = None
    photoURL: Optional[str] = None
    major: Optional[str] = None
    year: Optional[Union[str, int]] = None
    interests: Optional[List[str]] = None


class PublicProfile(BaseModel):
    uid: str
    displayName: str
    college: str
    bio: str
    photoURL: str
    major: str
    year: Any
    interests: List[Any]


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(LoginRequest):
    name: Optional[str] = None


class AuthTokens(BaseModel):
    idToken: Optional[str] = None
    refreshToken: Optional[str] = None
    expiresIn: Optional[str] = None


class AuthUserOut(BaseModel):
    uid: Optional[str] = None
    email: Optional[str] = None
    displayName: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    user: AuthUserOut
    tokens: AuthTokens
