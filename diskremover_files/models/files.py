from enum import Enum
from typing import Iterator, Optional, List
from pydantic import BaseModel, Field, PrivateAttr
from ..utils.paths import append_sub_path, bytes_to_gb
import errno
import logging
import os
import shutil
import stat
import tempfile


class SortDirection(str, Enum):
  ASCENDING = "ascending"
  DESCENDING = "descending"


class ScanState(str, Enum):
  UNSCANNED = "unscanned"
  EMPTY = "empty"
  POPULATED = "populated"


class SizeResult(BaseModel):
  size: int = Field(default=0, ge=0)
  # False when an error was swallowed while sizing this node or a descendant
  exact: bool = True


class WriteStatus(str, Enum):
  SUCCESS = "success"
  BLOCKED = "blocked"
  FAILED = "failed"


class WriteResult(BaseModel):
  status: WriteStatus
  detail: Optional[str] = None

  def __bool__(self):
    return self.status == WriteStatus.SUCCESS


class FileNodeInfo(BaseModel):
  name: str
  path: Optional[str] = None
  size: int = 0
  size_exact: bool = True
  is_file: bool
  creation_time: Optional[float] = None
  children: Optional[List["FileNodeInfo"]] = None


# stat errors meaning the path does not resolve to anything
_UNRESOLVED_ERRNOS = (errno.ENOENT, errno.ENOTDIR, errno.ELOOP, errno.ENAMETOOLONG)


def _creation_time(st: os.stat_result) -> float:
  birth_time = getattr(st, "st_birthtime", None)
  return birth_time if birth_time is not None else st.st_ctime


class FileNode(BaseModel):
  """A file or directory on the host filesystem.

  Directories are scanned on demand and sizes are computed lazily, then
  memoized for the lifetime of the node. Neither cache is invalidated and
  neither is safe to share across threads.
  """
  name: str = Field(frozen=True)
  name_without_extension: str = Field(frozen=True)
  path: Optional[str] = Field(default=None, frozen=True)
  is_directory: bool = Field(default=False, frozen=True)
  creation_time: Optional[float] = None
  children: Optional[List["FileNode"]] = None
  contents: Optional[str] = None

  _size: Optional[SizeResult] = PrivateAttr(default=None)

  @classmethod
  def from_path(cls, path) -> "FileNode":
    """Make a node from a path. The path does not need to exist.

    Args:
        path (str): The path of the file or directory.

    Raises:
        OSError: The path exists but its metadata cannot be read.

    Returns:
        FileNode: The node.
    """
    path = os.fspath(path)
    is_directory = False
    creation_time = 0.0
    try:
      st = os.stat(path)
    except OSError as e:
      if e.errno not in _UNRESOLVED_ERRNOS:
        raise
    else:
      is_directory = stat.S_ISDIR(st.st_mode)
      creation_time = _creation_time(st)
    name = os.path.basename(path.rstrip("/")) or path
    return cls(name=name,
               name_without_extension=os.path.splitext(name)[0],
               path=path,
               is_directory=is_directory,
               creation_time=creation_time)

  @classmethod
  def detached(cls, name: str) -> "FileNode":
    """Make a node that is not bound to any path."""
    return cls(name=name, name_without_extension=os.path.splitext(name)[0])

  @property
  def exists(self) -> bool:
    return self.path is not None and os.path.exists(self.path)

  @property
  def readable(self) -> bool:
    if self.path is None or self.is_directory or not self.exists:
      return False
    return os.access(self.path, os.R_OK)

  @property
  def writable(self) -> bool:
    if self.path is None or self.is_directory or not self.exists:
      return False
    return os.access(self.path, os.W_OK)

  @property
  def scan_state(self) -> ScanState:
    if self.children is None:
      return ScanState.UNSCANNED
    return ScanState.POPULATED if self.children else ScanState.EMPTY

  def scan(self, recurse: bool = False):
    """List the entries of this directory into children.

    Does nothing for files and detached nodes. Scanning again replaces the
    children but keeps any memoized size.

    Args:
        recurse (bool, optional): Also scan every sub directory. Defaults to False.

    Raises:
        OSError: A directory could not be listed. The children of this node
        are then left as they were.
    """
    if not self.is_directory or self.path is None:
      return
    entries = os.listdir(self.path)
    children = []
    for entry in entries:
      child = type(self).from_path(append_sub_path(self.path, entry))
      if recurse and child.is_directory:
        child.scan(recurse=True)
      children.append(child)
    self.children = children

  @property
  def size_result(self) -> SizeResult:
    """The memoized size of this node, with whether it could be fully computed."""
    if self._size is None:
      self._size = self._compute_size()
    return self._size

  @property
  def size(self) -> int:
    return self.size_result.size

  @property
  def size_in_gb(self) -> float:
    return bytes_to_gb(self.size)

  def _compute_size(self) -> SizeResult:
    if self.path is None:
      return SizeResult(size=0, exact=False)
    try:
      if not self.is_directory:
        return SizeResult(size=os.stat(self.path).st_size)
      if self.children is None:
        self.scan()
      total = 0
      exact = True
      for child in self.children:
        child_size = child.size_result
        total += child_size.size
        exact = exact and child_size.exact
      return SizeResult(size=total, exact=exact)
    except OSError as e:
      logging.debug(f"Could not compute size of {self.path}: {e}")
      return SizeResult(size=0, exact=False)

  def sort_by_creation_time(self, direction: SortDirection = SortDirection.ASCENDING):
    """Sort the scanned children by creation time, in place.

    Children without a creation time go last, whatever the direction.
    Grand children are left as they are.

    Args:
        direction (SortDirection, optional): Oldest or newest first. Defaults to ascending.
    """
    if self.children is None:
      return
    timed = [child for child in self.children if child.creation_time is not None]
    untimed = [child for child in self.children if child.creation_time is None]
    timed.sort(key=lambda child: child.creation_time,
               reverse=direction == SortDirection.DESCENDING)
    self.children[:] = timed + untimed

  def find(self, name: str) -> Optional["FileNode"]:
    """Depth first search of a file by its exact name. Directory names are not matched.

    Args:
        name (str): The file name.

    Returns:
        FileNode: The first matching file, or None.
    """
    if not self.is_directory:
      return None
    if self.children is None:
      self.scan()
    for child in self.children or []:
      if child.is_directory:
        found = child.find(name)
        if found is not None:
          return found
      elif child.name == name:
        return child
    return None

  def walk(self) -> Iterator["FileNode"]:
    """Yield this node and its scanned descendants, parents first. Never scans."""
    yield self
    for child in self.children or []:
      yield from child.walk()

  def read_all(self) -> Optional[str]:
    """Read the whole file as UTF-8 text into contents.

    Returns:
        str: The contents, or None if the file is not readable or not valid UTF-8.
    """
    if not self.readable:
      return None
    with open(self.path, "rb") as f:
      data = f.read()
    try:
      self.contents = data.decode("utf-8")
    except UnicodeDecodeError as e:
      logging.warning(f"File {self.path} is not valid UTF-8 text: {e}")
      return None
    return self.contents

  def _blocked_write(self) -> Optional[WriteResult]:
    if self.path is None:
      detail = f"{self.name} is not bound to a path"
    elif self.is_directory:
      detail = f"{self.path} is a directory"
    elif not self.exists:
      detail = f"{self.path} does not exist"
    elif not self.writable:
      detail = f"{self.path} is not writable"
    else:
      return None
    return WriteResult(status=WriteStatus.BLOCKED, detail=detail)

  def write_all(self, text: str) -> WriteResult:
    """Replace the file content with the text, atomically.

    Args:
        text (str): The new content.

    Returns:
        WriteResult: Success, blocked by a precondition, or failed.
    """
    blocked = self._blocked_write()
    if blocked is not None:
      return blocked
    temp_path = None
    try:
      directory = os.path.dirname(os.path.abspath(self.path))
      with tempfile.NamedTemporaryFile(delete=False, dir=directory, prefix=f".{self.name}.", suffix=".tmp") as temp_file:
        temp_path = temp_file.name
        temp_file.write(text.encode("utf-8"))
        temp_file.flush()
        os.fsync(temp_file.fileno())
      shutil.copymode(self.path, temp_path)
      os.replace(temp_path, self.path)
      temp_path = None
    except OSError as e:
      logging.error(f"Error writing file at {self.path}: {e}")
      return WriteResult(status=WriteStatus.FAILED, detail=str(e))
    finally:
      if temp_path is not None and os.path.exists(temp_path):
        os.unlink(temp_path)
    return WriteResult(status=WriteStatus.SUCCESS)

  def append(self, text: str) -> WriteResult:
    blocked = self._blocked_write()
    if blocked is not None:
      return blocked
    try:
      with open(self.path, "ab") as f:
        f.write(text.encode("utf-8"))
        f.flush()
        os.fsync(f.fileno())
    except OSError as e:
      logging.error(f"Error appending to file at {self.path}: {e}")
      return WriteResult(status=WriteStatus.FAILED, detail=str(e))
    return WriteResult(status=WriteStatus.SUCCESS)

  def truncate(self) -> WriteResult:
    return self.write_all("")

  def create_if_missing(self) -> bool:
    """Create an empty file at the node path if nothing is there yet.

    Returns:
        bool: True if a file was created.
    """
    if self.path is None or self.exists:
      return False
    try:
      with open(self.path, "xb"):
        pass
    except FileExistsError:
      return False
    return True

  def delete(self):
    """Remove the file, or the directory and everything below it.

    The in-memory tree is left untouched.

    Raises:
        FileNotFoundError: Nothing exists at the node path.
    """
    if self.path is None:
      return
    if os.path.isdir(self.path) and not os.path.islink(self.path):
      shutil.rmtree(self.path)
    else:
      os.remove(self.path)


# We need to update self references.
FileNodeInfo.model_rebuild()
FileNode.model_rebuild()
