"""Magic values for the whole package: endpoint pieces, retry defaults, messages."""

# Gemini endpoint
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-preview-09-2025"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_ENDPOINT_TEMPLATE = "%s/models/%s:generateContent"
GEMINI_API_KEY_HEADER = "x-goog-api-key"
USER_ROLE = "user"

# Retry / transport
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_REQUEST_TIMEOUT = 60
JSON_CONTENT_TYPE = "application/json"

# Image encoding
DATA_URI_TEMPLATE = "data:%s;base64,%s"
DATA_URI_SEPARATOR = ","
MEDIA_TYPE_PATTERN = r":(.*?);"
FALLBACK_MEDIA_TYPE = "application/octet-stream"
# (magic prefix, media type); WEBP is checked separately (RIFF....WEBP)
IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)
WEBP_MEDIA_TYPE = "image/webp"

# Error details (carried on the exception, surfaced as Failure.detail)
ERR_MALFORMED_DATA = "malformed data"
ERR_UNPARSEABLE_MEDIA_TYPE = "unparseable media type"
ERR_READ_FAILED = "read failed"
ERR_NOT_BINARY = "file handle returned text, expected bytes"
ERR_BAD_API_BASE = "GEMINI_API_BASE must be an http(s) URL with a host"
ERR_MISSING_INPUT = "missing image or question"
ERR_UNEXPECTED_RESPONSE = "unexpected response structure"
ERR_INVALID_JSON = "response body is not a JSON object"
ERR_CLIENT_STATUS = "Client error: %d"
ERR_SERVER_ATTEMPTS = "Server error after %d attempts"

# User-facing messages
MSG_ERR_MISSING_INPUT = "Please upload an image and ask a question."
MSG_ERR_UNPARSEABLE_RESPONSE = "Could not parse AI response. Please try again."
MSG_ERR_ANALYSIS_FAILED = "Analysis failed: %s. Please check your connection and try again."
MSG_ERR_BAD_IMAGE = "Error reading image file. Please try a different image."
MSG_ERR_READ_FILE = "Error reading file."

# Log messages
MSG_RETRYING = "Attempt %d/%d failed (%s), retrying in %d ms"
MSG_REQUEST_FAILED = "Request failed after attempt %d/%d: %s"
MSG_ANALYSIS_OK = "Analysis returned %d chars"
MSG_ANALYSIS_FAILED = "Analysis failed [%s]: %s"
MSG_ENCODED_IMAGE = "Encoded image: %s (%d base64 chars)"
MSG_ENCODING_FAILED = "Image encoding failed: %s"
MSG_SHAPE_MISMATCH = "Response missing expected text: %r"

# Quick actions offered beside the free-form question box
QUICK_ACTIONS: dict[str, str] = {
    "caption": "Generate a creative and engaging caption for this image.",
    "extract_text": (
        "Extract any and all text you can read from this image. "
        'If no text is present, say "No text found".'
    ),
    "identify_objects": "List the primary objects or subjects you see in this image.",
}
