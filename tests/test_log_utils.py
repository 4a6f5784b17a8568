import json

from ui.log_utils import _cleanup_folder, _redact_headers, write_forward_log


class TestWriteForwardLog:
    def test_writes_record_with_masked_secrets(self, tmp_path):
        path = write_forward_log(
            "GET",
            "https://api.example.com/v1/models",
            200,
            2,
            {"authorization": "Bearer abcdefghijklmnop", "accept": "*/*"},
            log_root=tmp_path,
        )

        record = json.loads(path.read_text())
        assert record["upstream_url"] == "https://api.example.com/v1/models"
        assert record["headers"]["authorization"] == "Bearer...mnop"
        assert record["headers"]["accept"] == "*/*"

    def test_folder_is_capped(self, tmp_path):
        for i in range(5):
            write_forward_log("GET", f"https://api.example.com/{i}", 200, 0, {}, log_root=tmp_path, keep=3)

        assert len(list((tmp_path / "forwarded").glob("*.json"))) == 3


class TestCleanupFolder:
    def test_keeps_newest_files(self, tmp_path):
        for name in ["20240101T000001", "20240101T000002", "20240101T000003"]:
            (tmp_path / f"{name}_x.json").write_text("{}")

        deleted = _cleanup_folder(tmp_path, keep=2)

        assert deleted == 1
        assert sorted(p.name for p in tmp_path.glob("*.json")) == [
            "20240101T000002_x.json",
            "20240101T000003_x.json",
        ]

    def test_missing_folder(self, tmp_path):
        assert _cleanup_folder(tmp_path / "absent", keep=1) == 0


def test_short_secret_fully_masked():
    assert _redact_headers({"x-api-key": "short"}) == {"x-api-key": "***"}
