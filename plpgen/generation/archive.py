# plpgen/generation/archive.py
"""
Zip container codec.

Both .plp templates and the outer outputs.zip are plain deflate zip files.
Entries are handled as an ordered mapping of name -> bytes. Directory
entries (names ending in "/") are ordinary members of the mapping and are
written back as they came, payload included.
"""
import io
import zipfile
import zlib
from typing import Dict, Mapping

from plpgen.core.exceptions import FormatError
from plpgen.core.logging import log

# Fixed metadata so that identical input always packs to identical bytes
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
FILE_MODE = 0o644 << 16
# drwxr-xr-x plus the MS-DOS directory bit
DIR_MODE = (0o40755 << 16) | 0x10

DEFAULT_COMPRESSION_LEVEL = 6

# RuntimeError covers encrypted entries; NotImplementedError (unsupported
# compression method) is a subclass of it
UNREADABLE = (zipfile.BadZipFile, zlib.error, EOFError, ValueError, RuntimeError)


def unpack(data: bytes) -> Dict[str, bytes]:
    """Unpack a zip buffer into {entry name: raw bytes}, in archive order."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            entries: Dict[str, bytes] = {}
            for info in zf.infolist():
                entries[info.filename] = zf.read(info)
    except UNREADABLE as e:
        raise FormatError(f"Not a valid archive: {e}") from e

    log("ARCHIVE", f"Unpacked {len(entries)} entries ({len(data)} bytes)")
    return entries


def pack(entries: Mapping[str, bytes], compression_level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """Pack {entry name: raw bytes} into a deflate zip buffer."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, payload in entries.items():
            info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = DIR_MODE if name.endswith("/") else FILE_MODE
            zf.writestr(info, payload, compresslevel=compression_level)
    return buf.getvalue()
