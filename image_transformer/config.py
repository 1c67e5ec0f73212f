"""Default settings, loaded into ``app.config`` by ``create_app``.

Every key can be overridden from the environment with the
``IMAGE_TRANSFORMER_`` prefix, e.g. ``IMAGE_TRANSFORMER_PORT=9000``.
"""


class DefaultConfig:
    HOST = "localhost"
    PORT = 8080
    LOG_LEVEL = "INFO"

    # Maximum accepted request body (100 KB)
    MAX_CONTENT_LENGTH = 100 * 1024
    MAX_IMAGE_DIMENSION = 1000  # px – larger images are rejected, not resized

    # Admission gate: one bucket for all traffic
    THROTTLING_ENABLED = True
    THROTTLING_LOG_ONLY = False
    THROTTLING_TRACK_CLIENTS = False
    THROTTLING_IGNORE_QUERY = True
    THROTTLING_INSTANCE = "api"
    THROTTLING_CAPACITY = 500
    THROTTLING_INTERVAL = 1.0  # seconds to refill a drained bucket
    THROTTLING_STATUS = 429
    THROTTLING_MAX_CONCURRENT = 1000  # requests in flight
    THROTTLING_MAX_BUCKETS = 10000  # distinct signatures tracked at once
