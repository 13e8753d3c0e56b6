import pytest
import tempfile
import shutil
from pathlib import Path
from diskremover_files.services import LocalDiskService, FileNodeInfo, SortDirection, WriteStatus


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    # Cleanup after test
    shutil.rmtree(temp_path)


@pytest.fixture
def local_service(temp_dir):
    """Create a LocalDiskService instance with a temporary base path."""
    return LocalDiskService(base_path=temp_dir)


@pytest.fixture
def sample_tree(temp_dir):
    """Create a sample tree for testing."""
    root = Path(temp_dir)
    (root / "docs" / "old").mkdir(parents=True)
    (root / "README.md").write_bytes(b"x" * 100)
    (root / "docs" / "guide.md").write_bytes(b"x" * 300)
    (root / "docs" / "old" / "draft.md").write_bytes(b"x" * 200)
    (root / "empty").mkdir()
    return temp_dir


class TestLocalDiskService:
    """Test suite for LocalDiskService."""

    def test_init_resolves_base_path(self, temp_dir):
        """Test that initialization resolves the base path."""
        service = LocalDiskService(base_path=temp_dir)
        assert service.base_path == Path(temp_dir).resolve()

    def test_init_missing_base_path(self, temp_dir):
        """Test that a missing base path is rejected."""
        with pytest.raises(FileNotFoundError):
            LocalDiskService(base_path=str(Path(temp_dir) / "missing"))

    @pytest.mark.asyncio
    async def test_scan(self, local_service, sample_tree):
        """Test scanning the base path."""
        result = await local_service.scan()

        assert isinstance(result, FileNodeInfo)
        assert result.path == "."
        assert result.is_file is False
        assert result.size == 600
        assert sorted(child.name for child in result.children) == ["README.md", "docs", "empty"]
        for child in result.children:
            if child.name == "docs":
                assert child.size == 500
                assert child.children is None
            elif child.name == "empty":
                assert child.size == 0

    @pytest.mark.asyncio
    async def test_scan_recurse(self, local_service, sample_tree):
        """Test scanning all sub directories."""
        result = await local_service.scan("docs", recurse=True)

        assert result.path == "docs"
        old = next(child for child in result.children if child.name == "old")
        assert [child.path for child in old.children] == ["docs/old/draft.md"]

    @pytest.mark.asyncio
    async def test_scan_depth(self, local_service, sample_tree):
        """Test limiting the reported depth."""
        result = await local_service.scan(recurse=True, depth=1)

        docs = next(child for child in result.children if child.name == "docs")
        assert docs.children is None
        assert docs.size == 500

    @pytest.mark.asyncio
    async def test_scan_empty_directory(self, local_service, sample_tree):
        """Test that an empty directory reports no children."""
        result = await local_service.scan("empty")
        assert result.children == []

    @pytest.mark.asyncio
    async def test_scan_sorted(self, local_service, sample_tree):
        """Test sorting scanned children by creation time."""
        ascending = await local_service.scan(sort=SortDirection.ASCENDING)
        descending = await local_service.scan(sort=SortDirection.DESCENDING)
        ascending_times = [child.creation_time for child in ascending.children]
        descending_times = [child.creation_time for child in descending.children]
        assert ascending_times == sorted(ascending_times)
        assert descending_times == sorted(descending_times, reverse=True)

    @pytest.mark.asyncio
    async def test_scan_file(self, local_service, sample_tree):
        """Test scanning a file describes the file."""
        result = await local_service.scan("README.md")
        assert result.is_file is True
        assert result.size == 100
        assert result.children is None

    @pytest.mark.asyncio
    async def test_scan_not_found(self, local_service):
        """Test scanning a missing path."""
        with pytest.raises(FileNotFoundError):
            await local_service.scan("missing")

    @pytest.mark.asyncio
    async def test_security_path_traversal(self, local_service):
        """Test that paths outside the base path are rejected."""
        with pytest.raises(ValueError):
            await local_service.scan("../outside")
        with pytest.raises(ValueError):
            await local_service.read_file("../../etc/passwd")
        with pytest.raises(ValueError):
            await local_service.delete("../outside")

    @pytest.mark.asyncio
    async def test_get_size(self, local_service, sample_tree):
        """Test computing sizes."""
        assert (await local_service.get_size("")).size == 600
        assert (await local_service.get_size("docs")).size == 500
        result = await local_service.get_size("missing.txt")
        assert result.size == 0
        assert result.exact is False

    @pytest.mark.asyncio
    async def test_find(self, local_service, sample_tree):
        """Test finding a file in sub folders."""
        result = await local_service.find("draft.md")
        assert result.path == "docs/old/draft.md"
        assert result.size == 200
        assert await local_service.find("draft.md", folder="docs/old") is not None

    @pytest.mark.asyncio
    async def test_find_not_found(self, local_service, sample_tree):
        """Test finding a missing file."""
        assert await local_service.find("missing.md") is None
        assert await local_service.find("old") is None
        assert await local_service.find("README.md", folder="empty") is None

    @pytest.mark.asyncio
    async def test_largest(self, local_service, sample_tree):
        """Test listing the largest files."""
        result = await local_service.largest()
        assert [item.path for item in result] == ["docs/guide.md", "docs/old/draft.md", "README.md"]
        assert all(item.is_file for item in result)

        result = await local_service.largest(limit=2)
        assert [item.size for item in result] == [300, 200]

    @pytest.mark.asyncio
    async def test_read_file(self, local_service):
        """Test reading a file."""
        (local_service.base_path / "test.txt").write_text("Test content")
        assert await local_service.read_file("test.txt") == "Test content"

    @pytest.mark.asyncio
    async def test_read_file_not_found(self, local_service, sample_tree):
        """Test reading a missing file or a directory."""
        with pytest.raises(FileNotFoundError):
            await local_service.read_file("missing.txt")
        with pytest.raises(FileNotFoundError):
            await local_service.read_file("docs")

    @pytest.mark.asyncio
    async def test_read_file_not_text(self, local_service):
        """Test reading a binary file."""
        (local_service.base_path / "image.bin").write_bytes(b"\x89PNG\xff\xfe")
        with pytest.raises(ValueError):
            await local_service.read_file("image.bin")

    @pytest.mark.asyncio
    async def test_write_file_creates(self, local_service):
        """Test writing a new file in a new folder."""
        result = await local_service.write_file("notes/todo.txt", "clean up")
        assert result.status == WriteStatus.SUCCESS
        assert (local_service.base_path / "notes" / "todo.txt").read_text() == "clean up"

    @pytest.mark.asyncio
    async def test_write_file_append(self, local_service):
        """Test appending to a file."""
        await local_service.write_file("log.txt", "first")
        result = await local_service.write_file("log.txt", " second", append=True)
        assert result
        assert await local_service.read_file("log.txt") == "first second"

    @pytest.mark.asyncio
    async def test_write_file_without_create(self, local_service):
        """Test that a missing file is blocked when creation is disabled."""
        result = await local_service.write_file("missing.txt", "content", create=False)
        assert result.status == WriteStatus.BLOCKED
        assert not (local_service.base_path / "missing.txt").exists()

    @pytest.mark.asyncio
    async def test_write_file_directory(self, local_service, sample_tree):
        """Test that a directory cannot be written."""
        result = await local_service.write_file("docs", "content")
        assert result.status == WriteStatus.BLOCKED

    @pytest.mark.asyncio
    async def test_write_file_too_large(self, temp_dir):
        """Test that oversized contents are rejected."""
        service = LocalDiskService(base_path=temp_dir, max_write_size=4)
        with pytest.raises(ValueError):
            await service.write_file("big.txt", "too large")
        assert not (service.base_path / "big.txt").exists()

    @pytest.mark.asyncio
    async def test_delete_file(self, local_service, sample_tree):
        """Test deleting a file."""
        assert await local_service.delete("README.md") is True
        assert not (local_service.base_path / "README.md").exists()

    @pytest.mark.asyncio
    async def test_delete_directory(self, local_service, sample_tree):
        """Test deleting a directory."""
        assert await local_service.delete("docs") is True
        assert not (local_service.base_path / "docs").exists()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, local_service):
        """Test deleting a missing path."""
        assert await local_service.delete("missing.txt") is False

    @pytest.mark.asyncio
    async def test_path_exists(self, local_service, sample_tree):
        """Test checking paths exist."""
        assert await local_service.path_exists("README.md") is True
        assert await local_service.path_exists("docs/old") is True
        assert await local_service.path_exists("missing.txt") is False
        assert await local_service.path_exists("../outside") is False

    @pytest.mark.asyncio
    async def test_delete_base_path(self, local_service):
        """Test that the base path cannot be deleted."""
        with pytest.raises(ValueError):
            await local_service.delete("")
        assert local_service.base_path.exists()
