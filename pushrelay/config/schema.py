from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pushrelay.constants import (
    DEFAULT_BODY_FIELD,
    DEFAULT_DISPLAY_NAME_FIELD,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MESSAGES_COLLECTION,
    DEFAULT_RECIPIENT_FIELD,
    DEFAULT_SENDER_FIELD,
    DEFAULT_USERS_COLLECTION,
    EXPO_PUSH_URL,
    EXPO_TIMEOUT_S,
)


class FirebaseConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    # Service-account JSON; application default credentials are used when unset.
    credentials_path: Optional[str] = None
    project_id: Optional[str] = None
    app_name: Optional[str] = None


class ExpoConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    access_token: Optional[str] = None
    base_url: str = EXPO_PUSH_URL
    timeout_s: float = Field(default=EXPO_TIMEOUT_S, gt=0)


class FeedConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    messages_collection: str = DEFAULT_MESSAGES_COLLECTION
    users_collection: str = DEFAULT_USERS_COLLECTION
    display_name_field: str = DEFAULT_DISPLAY_NAME_FIELD
    recipient_field: str = DEFAULT_RECIPIENT_FIELD
    sender_field: str = DEFAULT_SENDER_FIELD
    body_field: str = DEFAULT_BODY_FIELD

    @field_validator("messages_collection", "users_collection")
    @classmethod
    def validate_collection(cls, v: str) -> str:
        """Collection names must be non-empty and contain no path separators."""
        if not v or "/" in v:
            raise ValueError(f"Invalid collection name: {v!r}")
        return v


class ProbeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    # Accept addresses the provider reports as no longer registered.
    accept_unregistered: bool = True


class PushRelayConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    provider: Literal["fcm", "expo"] = "fcm"
    firebase: FirebaseConfig = FirebaseConfig()
    expo: ExpoConfig = ExpoConfig()
    feed: FeedConfig = FeedConfig()
    probe: ProbeConfig = ProbeConfig()
    log_level: str = DEFAULT_LOG_LEVEL
