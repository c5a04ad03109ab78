"""Project constants."""

API_TITLE = "eventstream API"
API_DESCRIPTION = "Server-Sent Events streams and closed-connection administration"
DEFAULT_BACKEND_PORT = 5000

EVENT_STREAM_MIMETYPE = "text/event-stream"
LAST_EVENT_ID_HEADER = "Last-Event-ID"
CONNECTION_ID_PARAM = "id"
