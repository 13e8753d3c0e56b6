from typing import List, Optional
from ..models.files import FileNode, FileNodeInfo, SizeResult, SortDirection, WriteResult
from ..utils.files import ContentChecker, FileNodeInfoBuilder, DEFAULT_MAX_FILE_SIZE
import logging
from pathlib import Path

class DiskService:
  """
  This service provides disk analysis and cleanup operations. It is an
  abstraction layer over the storage being analysed.
  """

  async def scan(self, path: str = "", recurse: bool = False, depth: Optional[int] = None,
                 sort: Optional[SortDirection] = None) -> FileNodeInfo:
    """Scan a directory and describe it with its sizes.

    Args:
        path (str, optional): The directory to scan. Defaults to "".
        recurse (bool, optional): Scan all sub directories. Defaults to False.
        depth (int, optional): How many levels of children to report. Defaults to all scanned levels.
        sort (SortDirection, optional): Sort children by creation time. Defaults to listing order.

    Returns:
        FileNodeInfo: The scanned tree.
    """
    pass

  async def get_size(self, path: str) -> SizeResult:
    """Compute the size of a file or directory.

    Args:
        path (str): The path to size.

    Returns:
        SizeResult: The size in bytes and whether it is exact.
    """
    pass

  async def find(self, name: str, folder: str = "") -> Optional[FileNodeInfo]:
    """Find a file by name in a folder and its sub folders.

    Args:
        name (str): The exact file name.
        folder (str, optional): The folder to search from. Defaults to "".

    Returns:
        FileNodeInfo: The first file found, None otherwise.
    """
    pass

  async def largest(self, folder: str = "", limit: int = 10) -> List[FileNodeInfo]:
    """List the largest files of a folder and its sub folders.

    Args:
        folder (str, optional): The folder to search from. Defaults to "".
        limit (int, optional): The maximum number of files. Defaults to 10.

    Returns:
        List[FileNodeInfo]: The files, biggest first.
    """
    pass

  async def read_file(self, path: str) -> str:
    """Read the text content of a file.

    Args:
        path (str): The file path.

    Returns:
        str: The file content.
    """
    pass

  async def write_file(self, path: str, contents: str, append: bool = False, create: bool = True) -> WriteResult:
    """Write text to a file.

    Args:
        path (str): The file path.
        contents (str): The text to write.
        append (bool, optional): Append instead of replacing. Defaults to False.
        create (bool, optional): Create the file when missing. Defaults to True.

    Returns:
        WriteResult: The outcome of the write.
    """
    pass

  async def delete(self, path: str) -> bool:
    """Delete the file or directory at the specified path.

    Args:
        path (str): The path to delete.

    Returns:
        bool: True if the deletion was successful, False otherwise.
    """
    pass

  async def path_exists(self, path: str) -> bool:
    """Check a file or directory exists at the specified path.

    Args:
        path (str): The path to check.

    Returns:
        bool: True if the path exists, False otherwise.
    """
    pass

class LocalDiskService(DiskService):
  """
  This service provides disk analysis and cleanup operations on the local file system.
  """

  def __init__(self, base_path: str = ".", max_write_size: int = DEFAULT_MAX_FILE_SIZE):
    """Initialize the local disk service with a base path.

    Args:
        base_path (str): The directory all operations are confined to. Defaults to current directory.
        max_write_size (int, optional): The maximum size of written contents. Defaults to 100 MB.
    """
    self.base_path = Path(base_path).resolve()
    if not self.base_path.is_dir():
      raise FileNotFoundError(f"Base path {base_path} is not a directory")
    self.checker = ContentChecker(max_size=max_write_size)

  def _get_full_path(self, path: str) -> Path:
    """Get the full path by joining with base path.

    Args:
        path (str): The relative path.

    Returns:
        Path: The full resolved path.
    """
    full_path = (self.base_path / path).resolve()
    # Ensure the path is within base_path (security check)
    if not full_path.is_relative_to(self.base_path):
      raise ValueError(f"Path {path} is outside the base path")
    return full_path

  def _get_node(self, path: str) -> FileNode:
    return FileNode.from_path(str(self._get_full_path(path)))

  def _to_info(self, node: FileNode, depth: Optional[int] = None) -> FileNodeInfo:
    return FileNodeInfoBuilder.from_node(node, depth=depth, base_path=str(self.base_path)).build()

  async def scan(self, path: str = "", recurse: bool = False, depth: Optional[int] = None,
                 sort: Optional[SortDirection] = None) -> FileNodeInfo:
    """Scan a directory and describe it with its sizes.

    Args:
        path (str, optional): The directory to scan. Defaults to "".
        recurse (bool, optional): Scan all sub directories. Defaults to False.
        depth (int, optional): How many levels of children to report. Defaults to all scanned levels.
        sort (SortDirection, optional): Sort children by creation time. Defaults to listing order.

    Returns:
        FileNodeInfo: The scanned tree.
    """
    node = self._get_node(path)
    if not node.exists:
      raise FileNotFoundError(f"Path {path} does not exist")
    node.scan(recurse=recurse)
    if sort is not None:
      for item in node.walk():
        item.sort_by_creation_time(sort)
    return self._to_info(node, depth=depth)

  async def get_size(self, path: str) -> SizeResult:
    return self._get_node(path).size_result

  async def find(self, name: str, folder: str = "") -> Optional[FileNodeInfo]:
    found = self._get_node(folder).find(name)
    if found is None:
      return None
    return self._to_info(found, depth=0)

  async def largest(self, folder: str = "", limit: int = 10) -> List[FileNodeInfo]:
    """List the largest files of a folder and its sub folders.

    Args:
        folder (str, optional): The folder to search from. Defaults to "".
        limit (int, optional): The maximum number of files. Defaults to 10.

    Returns:
        List[FileNodeInfo]: The files, biggest first.
    """
    node = self._get_node(folder)
    node.scan(recurse=True)
    files = [item for item in node.walk() if not item.is_directory]
    files.sort(key=lambda item: item.size, reverse=True)
    return [self._to_info(item, depth=0) for item in files[:limit]]

  async def read_file(self, path: str) -> str:
    """Read the text content of a file.

    Args:
        path (str): The file path.

    Returns:
        str: The file content.
    """
    full_path = self._get_full_path(path)
    if not full_path.is_file():
      raise FileNotFoundError(f"File {path} does not exist")
    node = FileNode.from_path(str(full_path))
    if not node.readable:
      raise PermissionError(f"File {path} is not readable")
    contents = node.read_all()
    if contents is None:
      raise ValueError(f"File {path} is not valid UTF-8 text")
    return contents

  async def write_file(self, path: str, contents: str, append: bool = False, create: bool = True) -> WriteResult:
    """Write text to a file.

    Args:
        path (str): The file path.
        contents (str): The text to write.
        append (bool, optional): Append instead of replacing. Defaults to False.
        create (bool, optional): Create the file and its parent folders when missing. Defaults to True.

    Returns:
        WriteResult: The outcome of the write.
    """
    self.checker.check_size(contents)
    full_path = self._get_full_path(path)
    if create and not full_path.exists():
      # Create parent directory if it doesn't exist
      full_path.parent.mkdir(parents=True, exist_ok=True)
      FileNode.from_path(str(full_path)).create_if_missing()
    node = FileNode.from_path(str(full_path))
    result = node.append(contents) if append else node.write_all(contents)
    if not result:
      logging.warning(f"Could not write file at {path}: {result.detail}")
    return result

  async def delete(self, path: str) -> bool:
    """Delete the file or directory at the specified path.

    Args:
        path (str): The path to delete.

    Returns:
        bool: True if the deletion was successful, False otherwise.
    """
    full_path = self._get_full_path(path)
    if full_path == self.base_path:
      raise ValueError("The base path cannot be deleted")
    try:
      node = FileNode.from_path(str(full_path))
      if not node.exists:
        return False
      node.delete()
      return True
    except Exception as e:
      logging.error(f"Error deleting file at {path}: {e}")
      return False

  async def path_exists(self, path: str) -> bool:
    """Check a file or directory exists at the specified path.

    Args:
        path (str): The path to check.

    Returns:
        bool: True if the path exists, False otherwise.
    """
    try:
      full_path = self._get_full_path(path)
      return full_path.exists()
    except (ValueError, OSError) as e:
      logging.error(f"Error checking path existence for {path}: {e}")
      return False
