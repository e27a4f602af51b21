"""
Pytest fixtures for product_drive_uploader tests.

No test talks to Google or the network: Drive is replaced by an in-memory
FakeDrive and image downloads by FakeFetcher (or a patched requests.get).
"""

import pytest

from product_drive_uploader.config import settings
from product_drive_uploader.core import drive_setup
from product_drive_uploader.core.drive_utils import file_view_url, folder_url
from product_drive_uploader.core.errors import ImageDownloadError
from product_drive_uploader.core.image_fetcher import FetchedImage
from product_drive_uploader.core.product_schema import ImageDescriptor, ProductUploadRequest


class FakeDrive:
    """In-memory stand-in for DriveClient (folders hold a flat list of files)."""

    def __init__(self):
        self.folders = {}
        self.public = []
        self.fail_uploads = set()
        self.fail_public = False
        self.uploaded = []
        self._counter = 0

    def _next_id(self, prefix):
        self._counter += 1
        return f"{prefix}-{self._counter:04d}"

    def create_folder(self, name, parent_id=None):
        fid = self._next_id("folder")
        record = {"id": fid, "name": name, "webViewLink": folder_url(fid), "webContentLink": ""}
        self.folders[fid] = dict(record, files=[])
        return record

    def upload_file(self, name, mime_type, content, folder_id=None):
        if name in self.fail_uploads:
            raise RuntimeError("Google Drive API rate limit")
        fid = self._next_id("file")
        record = {
            "id": fid,
            "name": name,
            "mimeType": mime_type,
            "webViewLink": file_view_url(fid),
            "webContentLink": f"https://drive.google.com/uc?id={fid}",
        }
        self.folders[folder_id]["files"].append(record)
        self.uploaded.append((name, mime_type, content))
        return dict(record)

    def list_files(self, folder_id=None, page_size=100, all_pages=False):
        files = [dict(f) for f in self.folders[folder_id]["files"]]
        return files if all_pages else files[:page_size]

    def get_file(self, file_id):
        folder = self.folders.get(file_id)
        if folder is None:
            return None
        return {k: v for k, v in folder.items() if k != "files"}

    def make_file_public(self, file_id):
        if self.fail_public:
            raise RuntimeError("permission denied")
        self.public.append(file_id)

    def add_existing_folder(self, name, file_names):
        folder = self.create_folder(name)
        for file_name in file_names:
            self.upload_file(file_name, "image/jpeg", b"old", folder["id"])
        self.uploaded.clear()
        return folder


class FakeFetcher:
    """Callable replacement for fetch_image keyed by URL; unknown URLs fail."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            raise ImageDownloadError(url, 3, "HTTP 404 Not Found")
        return response


def jpeg(content=b"fake-image-data"):
    return FetchedImage(content=content, mime_type="image/jpeg")


def png(content=b"fake-png-data"):
    return FetchedImage(content=content, mime_type="image/png")


def make_image(image_id, sort_order, primary=None, fallback=None, filename=None):
    return ImageDescriptor(
        id=image_id,
        filename=filename or f"{image_id}.jpg",
        sort_order=sort_order,
        primary_source_url=primary,
        fallback_source_url=fallback,
    )


def make_product(**overrides):
    data = dict(
        id="prod-1234-5678",
        name="Test Sneaker",
        sku="TST-001",
        images=[
            make_image("img-1", 0, "https://storage.example.com/processed1.jpg", "https://storage.example.com/original1.jpg"),
            make_image("img-2", 1, "https://storage.example.com/processed2.jpg", "https://storage.example.com/original2.jpg"),
        ],
    )
    data.update(overrides)
    return ProductUploadRequest(**data)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """No domain allowlist, no env-provided ids, empty setup cache."""
    monkeypatch.setattr(settings, "ALLOWED_IMAGE_DOMAINS", [])
    monkeypatch.setattr(settings, "DRIVE_ROOT_FOLDER_ID", "")
    monkeypatch.setattr(settings, "SPREADSHEET_ID", "")
    drive_setup.reset_cache()
    yield
    drive_setup.reset_cache()


@pytest.fixture
def drive():
    return FakeDrive()
