"""
run_once command: status bookkeeping around upload_product_to_drive.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from product_drive_uploader import run_once
from product_drive_uploader.core.errors import EmptyUploadError
from product_drive_uploader.core.product_schema import UploadOutcome, UploadedFile
from product_drive_uploader.core.state_store import StateStore
from product_drive_uploader.pipeline.product_upload import upload_product_to_drive

from conftest import FakeFetcher, make_image, make_product


def _outcome(folder_url="https://drive.google.com/drive/folders/folder-0001"):
    return UploadOutcome(
        folder_id="folder-0001",
        folder_url=folder_url,
        folder_reused=False,
        uploaded_files=[UploadedFile(id="f1", name="1_TST-001.jpg", web_view_link="https://drive/f1")],
    )


class TestUploadOne:

    def test_success_marks_uploaded(self, tmp_path):
        state = StateStore(tmp_path / "state.json")
        with patch.object(run_once, "upload_product_to_drive", return_value=_outcome()) as mock_upload:
            assert run_once.upload_one(make_product(), state, MagicMock(), None) is True

        record = state.get_product_record("prod-1234-5678")
        assert record["status"] == "uploaded"
        assert record["uploaded_count"] == 1
        assert record["folder_url"] == "https://drive.google.com/drive/folders/folder-0001"
        assert mock_upload.call_args.kwargs["sync_sheet"] is False

    def test_failure_marks_error(self, tmp_path):
        state = StateStore(tmp_path / "state.json")
        with patch.object(run_once, "upload_product_to_drive", side_effect=EmptyUploadError(2)):
            assert run_once.upload_one(make_product(), state, MagicMock(), None) is False

        record = state.get_product_record("prod-1234-5678")
        assert record["status"] == "error"
        assert "0 of 2 images uploaded" in record["error"]

    def test_retry_reuses_recorded_folder(self, tmp_path):
        state = StateStore(tmp_path / "state.json")
        state.mark_product_status("prod-1234-5678", "Test Sneaker", "error", folder_url="https://drive.google.com/drive/folders/abc1234567")

        with patch.object(run_once, "upload_product_to_drive", return_value=_outcome()) as mock_upload:
            run_once.upload_one(make_product(), state, MagicMock(), None)

        product = mock_upload.call_args.args[0]
        assert product.existing_folder_ref == "https://drive.google.com/drive/folders/abc1234567"

    def test_uploaded_products_skipped_unless_forced(self, tmp_path):
        state = StateStore(tmp_path / "state.json")
        state.mark_product_status("prod-1234-5678", "Test Sneaker", "uploaded")

        with patch.object(run_once, "upload_product_to_drive", return_value=_outcome()) as mock_upload:
            run_once.upload_one(make_product(), state, MagicMock(), None)
            mock_upload.assert_not_called()

            run_once.upload_one(make_product(), state, MagicMock(), None, force=True)
            mock_upload.assert_called_once()


class TestMain:

    def test_main_processes_snapshot(self, tmp_path):
        snapshot = tmp_path / "products.json"
        snapshot.write_text(json.dumps([{"id": "p1", "name": "A"}, {"id": "p2", "name": "B"}]), encoding="utf-8")
        state_file = tmp_path / "state.json"

        with patch.object(run_once, "setup_logging"), \
                patch.object(run_once, "DriveClient"), \
                patch.object(run_once, "upload_product_to_drive", side_effect=[_outcome(), RuntimeError("boom")]):
            code = run_once.main([str(snapshot), "--state-file", str(state_file)])

        assert code == 1
        state = StateStore(state_file)
        assert state.get_product_record("p1")["status"] == "uploaded"
        assert state.get_product_record("p2")["status"] == "error"

class TestInterruptedAndFailedRuns:

    def test_interrupt_marks_error_and_next_run_retries(self, tmp_path):
        state = StateStore(tmp_path / "state.json")

        with patch.object(run_once, "upload_product_to_drive", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                run_once.upload_one(make_product(), state, MagicMock(), None)

        assert state.get_product_record("prod-1234-5678")["status"] == "error"

        with patch.object(run_once, "upload_product_to_drive", return_value=_outcome()) as mock_upload:
            assert run_once.upload_one(make_product(), state, MagicMock(), None) is True
            mock_upload.assert_called_once()

    def test_leftover_uploading_status_is_retried(self, tmp_path):
        state = StateStore(tmp_path / "state.json")
        state.mark_product_status("prod-1234-5678", "Test Sneaker", "uploading")

        assert "prod-1234-5678" in state.list_products()
        with patch.object(run_once, "upload_product_to_drive", return_value=_outcome()) as mock_upload:
            run_once.upload_one(make_product(), state, MagicMock(), None)
            mock_upload.assert_called_once()

        assert state.get_product_record("prod-1234-5678")["status"] == "uploaded"

    def test_repeated_total_failure_reuses_one_folder(self, tmp_path, drive):
        state = StateStore(tmp_path / "state.json")
        product = make_product(images=[make_image("img-1", 0, "https://storage.example.com/p1.jpg")])

        def failing_upload(product, drive, sheets, sync_sheet):
            return upload_product_to_drive(product, drive=drive, sheets=sheets, sync_sheet=sync_sheet, fetch=FakeFetcher())

        with patch.object(run_once, "upload_product_to_drive", side_effect=failing_upload):
            assert run_once.upload_one(product, state, drive, None) is False
            assert run_once.upload_one(product, state, drive, None) is False

        assert len(drive.folders) == 1
        [folder_id] = drive.folders
        record = state.get_product_record("prod-1234-5678")
        assert record["status"] == "error"
        assert record["folder_url"] == f"https://drive.google.com/drive/folders/{folder_id}"


class TestRetryFlag:

    def test_retry_only_processes_unfinished_products(self, tmp_path):
        snapshot = tmp_path / "products.json"
        snapshot.write_text(json.dumps([
            {"id": "p1", "name": "A"},
            {"id": "p2", "name": "B"},
            {"id": "p3", "name": "C"},
        ]), encoding="utf-8")
        state_file = tmp_path / "state.json"
        state = StateStore(state_file)
        state.mark_product_status("p1", "A", "uploaded")
        state.mark_product_status("p2", "B", "error")

        with patch.object(run_once, "setup_logging"), \
                patch.object(run_once, "DriveClient"), \
                patch.object(run_once, "upload_product_to_drive", return_value=_outcome()) as mock_upload:
            code = run_once.main([str(snapshot), "--state-file", str(state_file), "--retry"])

        assert code == 0
        assert [c.args[0].id for c in mock_upload.call_args_list] == ["p2"]
