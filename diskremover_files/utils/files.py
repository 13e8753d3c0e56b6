from typing import Optional
from pathlib import Path
from diskremover_files.models.files import FileNode, FileNodeInfo

# 100 MB in binary
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024


class ContentChecker:
    """A class that checks the size of text contents before they are written
    """

    def __init__(self, max_size: int = DEFAULT_MAX_FILE_SIZE):
        self.max_size = max_size

    def check_size(self, contents: str) -> str:
        content_size = len(contents.encode("utf-8"))
        if content_size > self.max_size:
            raise ValueError(f"Content size {content_size} exceeds max size {self.max_size}")
        return contents


class FileNodeInfoBuilder:
    """Makes a serializable snapshot of a file node and of its scanned children.
    """

    def __init__(self, node: FileNode, depth: Optional[int] = None, base_path: Optional[str] = None):
        self.node = node
        self.depth = depth
        self.base_path = Path(base_path) if base_path else None

    @classmethod
    def from_node(cls, node: FileNode, depth: Optional[int] = None, base_path: Optional[str] = None):
        """Make a builder from a live file node.

        Args:
            node (FileNode): The root of the snapshot.
            depth (int, optional): How many levels of children to include, all when None.
            base_path (str, optional): Report paths relative to this directory.

        Returns:
            FileNodeInfoBuilder: The builder
        """
        return cls(node, depth=depth, base_path=base_path)

    def _to_path(self, path: Optional[str]) -> Optional[str]:
        if path is None or self.base_path is None:
            return path
        return Path(path).relative_to(self.base_path).as_posix()

    def _to_info(self, node: FileNode, depth: Optional[int]) -> FileNodeInfo:
        # Children are taken before sizing, as sizing may scan the node
        children = None
        if node.children is not None and (depth is None or depth > 0):
            next_depth = None if depth is None else depth - 1
            children = [self._to_info(child, next_depth) for child in list(node.children)]
        size = node.size_result
        return FileNodeInfo(name=node.name,
                            path=self._to_path(node.path),
                            size=size.size,
                            size_exact=size.exact,
                            is_file=not node.is_directory,
                            creation_time=node.creation_time,
                            children=children)

    def build(self) -> FileNodeInfo:
        """Get the root of the tree of file node snapshots.

        Returns:
            FileNodeInfo: The root snapshot
        """
        return self._to_info(self.node, self.depth)
