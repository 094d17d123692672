"""Holder for the most recent decode session."""

from __future__ import annotations

from mobilithek_csv.common.config_loader import DecodeOptions
from mobilithek_csv.common.errors import ExportStaleStateError
from mobilithek_csv.common.models import DecodeSession
from mobilithek_csv.decode.orchestrator import decode_response


class SessionState:
    """Keeps the last source text and its decoded items as one unit.

    The session is only swapped after a decode finished, so a failed decode
    leaves the previous one in place.
    """

    def __init__(self) -> None:
        self.session: DecodeSession | None = None

    def decode(self, xml_text: str, options: DecodeOptions | None = None) -> DecodeSession:
        session = decode_response((xml_text or "").strip(), options)
        self.session = session
        return session

    def clear(self) -> None:
        self.session = None

    def require_fresh(self, current_text: str | None) -> DecodeSession:
        session = self.session
        current = (current_text or "").strip()
        if session is not None and current and session.source_text and current != session.source_text:
            raise ExportStaleStateError("XML changed since last decode. Decode the binaries again first.")
        if session is None or not session.items:
            raise ExportStaleStateError("Nothing decoded yet. Decode the binaries first.")
        return session
