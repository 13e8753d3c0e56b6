from .files import DiskService, LocalDiskService
from ..models.files import FileNode, FileNodeInfo, ScanState, SizeResult, SortDirection, WriteResult, WriteStatus
from .api import make_router
