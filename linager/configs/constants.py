"""
Linager Constants

Binary extensions, asset limits and document chunking bounds.
"""

# --- Binary Extensions ---

# Files with these extensions are never collected as assets
_BINARY_GROUPS = {
    "compiled": ".exe .bin .so .dylib .dll .o .a .lib .class .jar .pyc .wasm",
    "image": ".png .jpg .jpeg .gif .bmp .ico .webp",
    "media": ".mp3 .mp4 .wav .avi .mov .webm",
    "archive": ".zip .tar .gz .bz2 .7z .rar",
    "document": ".pdf .doc .docx .xls .xlsx",
    "font": ".ttf .otf .woff .woff2 .eot",
    "database": ".db .sqlite .sqlite3",
}

BINARY_EXTENSIONS = frozenset(ext for group in _BINARY_GROUPS.values() for ext in group.split())

# --- Assets ---

MAX_ASSET_DOCUMENT_SIZE = 16 * 1024  # Larger assets produce no document

# --- Document Chunking ---

MAX_DOCUMENT_SIZE = 8192
DOCUMENT_SIZE_RESERVE = 256
CHUNK_SIZE = MAX_DOCUMENT_SIZE - DOCUMENT_SIZE_RESERVE  # 7936 bytes
DOCUMENT_SIZE_OVERHEAD = 20  # Counted per document by Documents.size()
