"""HTTP responses carrying pass and bundle archives."""

from __future__ import annotations

from starlette.responses import Response

PKPASS_MEDIA_TYPE = "application/vnd.apple.pkpass"
PKPASSES_MEDIA_TYPE = "application/vnd.apple.pkpasses"


def archive_response(content: bytes, filename: str, media_type: str) -> Response:
    """Wrap archive *content* in a download response.

    Wallet on iOS needs the exact media type (no charset), an attachment
    disposition and a content length.
    """
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Length": str(len(content)),
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )


__all__ = ["PKPASSES_MEDIA_TYPE", "PKPASS_MEDIA_TYPE", "archive_response"]
