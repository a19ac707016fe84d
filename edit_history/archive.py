# edit_history/archive.py
"""
Zip container for one document's version chain.

One member per VersionKey, DEFLATE compressed. Member dates are stored as
local time in the zip (DOS) format, which only has 2-second resolution and
can't go before 1980; that loss is accepted since the key carries the exact
second.
"""
import io
import os
import tempfile
from datetime import datetime
from zipfile import ZipFile, ZipInfo, ZIP_DEFLATED, BadZipFile

from loguru import logger

from .chain import VersionChain
from .errors import ArchiveWriteError, CorruptArchive, InvalidKey, NotAFile
from .models import VersionEntry

EDIT_HISTORY_FILE_EXT = ".edtz"

_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def _zip_date_time(dt: datetime):
    tt = dt.timetuple()[:6]
    if tt < _ZIP_EPOCH:
        return _ZIP_EPOCH
    # DOS time keeps even seconds only
    return tt[:5] + (tt[5] - tt[5] % 2,)


def check_is_file(path: str):
    if os.path.exists(path) and not os.path.isfile(path):
        raise NotAFile(path)


def exists(path: str) -> bool:
    check_is_file(path)
    return os.path.exists(path)


def read_chain_bytes(data: bytes, path: str = "<memory>") -> VersionChain:
    entries = []
    try:
        with ZipFile(io.BytesIO(data)) as z:
            for info in z.infolist():
                if info.is_dir():
                    continue
                entries.append(VersionEntry(
                    key=info.filename,
                    payload=z.read(info),
                    compressed_size=info.compress_size,
                    stored_date=datetime(*info.date_time),
                ))
        return VersionChain(entries, byte_size=len(data))
    except (BadZipFile, InvalidKey, OSError, EOFError, ValueError) as e:
        raise CorruptArchive(path, str(e))


def load_chain(path: str) -> VersionChain:
    """
    Read the whole archive into a private in-memory snapshot.
    A missing archive is an empty chain.
    """
    check_is_file(path)
    if not os.path.exists(path):
        return VersionChain()
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise CorruptArchive(path, str(e))
    logger.debug(f"Loaded {path} ({len(data)} bytes)")
    return read_chain_bytes(data, path)


def chain_to_bytes(chain: VersionChain) -> bytes:
    buf = io.BytesIO()
    # Oldest first so member order matches the chain's chronology
    with ZipFile(buf, "w", ZIP_DEFLATED) as z:
        for entry in chain.entries(descending=False):
            info = ZipInfo(entry.key, date_time=_zip_date_time(entry.stored_date))
            info.compress_type = ZIP_DEFLATED
            z.writestr(info, entry.payload)
    return buf.getvalue()


def save_chain(path: str, chain: VersionChain) -> int:
    """
    Write via a temp file + os.replace, so the archive on disk is either the
    old one or the new one. Returns the archive size.
    """
    check_is_file(path)
    data = chain_to_bytes(chain)
    dirpath = os.path.dirname(path) or "."
    tmp = None
    try:
        os.makedirs(dirpath, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".", suffix=".tmp" + EDIT_HISTORY_FILE_EXT, dir=dirpath)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
        tmp = None
    except OSError as e:
        raise ArchiveWriteError(path, str(e))
    finally:
        if tmp and os.path.exists(tmp):
            os.remove(tmp)
    logger.debug(f"Saved {path} ({len(data)} bytes, {len(chain)} entries)")
    return len(data)


def rename_archive(old_path: str, new_path: str) -> bool:
    check_is_file(old_path)
    check_is_file(new_path)
    if not os.path.exists(old_path):
        return False
    if os.path.exists(new_path):
        logger.warning(f"Replacing existing edit history file {new_path}")
    try:
        os.makedirs(os.path.dirname(new_path) or ".", exist_ok=True)
        os.replace(old_path, new_path)
    except OSError as e:
        raise ArchiveWriteError(new_path, str(e))
    return True


def delete_archive(path: str) -> bool:
    check_is_file(path)
    if not os.path.exists(path):
        return False
    try:
        os.remove(path)
    except OSError as e:
        raise ArchiveWriteError(path, str(e))
    return True
