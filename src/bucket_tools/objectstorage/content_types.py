"""Content type inference from object key extensions."""

DEFAULT_CONTENT_TYPE = "application/octet-stream"

VIDEO_CONTENT_TYPES = {
    "mp4": "video/mp4",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
    "wmv": "video/x-ms-wmv",
    "flv": "video/x-flv",
    "webm": "video/webm",
    "mkv": "video/x-matroska",
    "m4v": "video/x-m4v",
    "3gp": "video/3gpp",
    "ts": "video/mp2t",
}

COMMON_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "pdf": "application/pdf",
}


def extension_of(key: str) -> str:
    """Lower-cased extension of the key's filename, or "" when it has none."""
    name = key.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def classify(key: str) -> str:
    """Map an object key to a MIME type.

    Video types are checked first, then common image/audio/document types.
    Unknown or missing extensions map to ``application/octet-stream``.
    """
    extension = extension_of(key)
    if extension in VIDEO_CONTENT_TYPES:
        return VIDEO_CONTENT_TYPES[extension]
    return COMMON_CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)
