"""Shared constants for pushrelay."""

# Logging
DEFAULT_LOG_LEVEL = "INFO"
ENV_LOG_LEVEL = "PUSHRELAY_LOG_LEVEL"
ENV_LOG_FORMAT = "PUSHRELAY_LOG_FORMAT"

# Config locations
ENV_CONFIG_PATH = "PUSHRELAY_CONFIG_PATH"
ENV_DOTENV_PATH = "PUSHRELAY_ENV_PATH"
DEFAULT_CONFIG_PATH = "~/.pushrelay/pushrelay.yml"

# Provider batch limits (messages per send call)
FCM_MAX_BATCH_SIZE = 500
EXPO_MAX_BATCH_SIZE = 100

# FCM answers a dry-run send with this message id suffix instead of a real id
FCM_DRY_RUN_SENTINEL = "fake_message_id"

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
EXPO_TIMEOUT_S = 10.0

# Firestore collections and message fields
DEFAULT_MESSAGES_COLLECTION = "messages"
DEFAULT_USERS_COLLECTION = "users"
DEFAULT_DISPLAY_NAME_FIELD = "displayName"
DEFAULT_RECIPIENT_FIELD = "to"
DEFAULT_SENDER_FIELD = "from"
DEFAULT_BODY_FIELD = "text"

# Custom claim carrying role names on verified ID tokens
ROLES_CLAIM = "roles"

# Shutdown
SHUTDOWN_TIMEOUT_S = 5.0
