"""
Content-type lookup for bucket objects
"""
import mimetypes

DEFAULT_CONTENT_TYPE = "text/html"

# mimetypes reports compression as an encoding; objects are served as-is,
# so the stored type is the compressed container's.
_ENCODING_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
    "br": "application/x-brotli",
}


def content_type_for(key: str) -> str:
    """Infer an object's content-type from its key's extension.

    Args:
        key: Object key or relative path

    Returns:
        MIME type, ``text/html`` when the extension is unknown
    """
    content_type, encoding = mimetypes.guess_type(key, strict=False)
    if encoding:
        return _ENCODING_TYPES.get(encoding, DEFAULT_CONTENT_TYPE)
    return content_type or DEFAULT_CONTENT_TYPE
