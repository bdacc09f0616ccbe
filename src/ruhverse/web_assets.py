from __future__ import annotations

from urllib.parse import quote

CRESCENT_ICON_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 64 64">'
    '<circle cx="32" cy="32" r="30" fill="#064e3b"/>'
    '<path d="M38 14a18 18 0 1 0 0 36a14 14 0 1 1 0-36z" fill="#d4af37"/>'
    '<path d="M44 24l1.8 3.7 4 .6-2.9 2.8.7 4-3.6-1.9-3.6 1.9.7-4-2.9-2.8 4-.6z" fill="#fef3c7"/>'
    "</svg>"
)

RUHVERSE_FAVICON_URL = "data:image/svg+xml," + quote(CRESCENT_ICON_SVG)
