"""Uploaded media: bucket whitelist, size limit, key format and serving."""
import io
import re

import pytest
from werkzeug.datastructures import FileStorage

from churchhub.exceptions import ValidationError
from churchhub.services.storage_service import BlobStorage, generate_key

KEY_PATTERN = re.compile(r"^\d{13}-[0-9a-f]{8}\.mp3$")


class TestBlobStorage:
    def test_key_format(self):
        assert KEY_PATTERN.match(generate_key("Sunday Sermon.MP3"))

    def test_keys_do_not_collide(self):
        keys = {generate_key("a.mp3") for _ in range(50)}
        assert len(keys) == 50

    def test_upload_and_public_url(self, tmp_path):
        storage = BlobStorage(str(tmp_path), "https://cdn.example.com/", max_size_mb=1)
        key = storage.upload("sermon-audio", FileStorage(io.BytesIO(b"ID3"), filename="talk.mp3"))
        assert (tmp_path / "sermon-audio" / key).read_bytes() == b"ID3"
        assert storage.get_public_url("sermon-audio", key) == f"https://cdn.example.com/storage/sermon-audio/{key}"

    def test_unknown_bucket(self, tmp_path):
        storage = BlobStorage(str(tmp_path))
        with pytest.raises(ValidationError):
            storage.upload("secrets", FileStorage(io.BytesIO(b"x"), filename="x.txt"))

    def test_size_limit(self, tmp_path):
        storage = BlobStorage(str(tmp_path), max_size_mb=1)
        big = FileStorage(io.BytesIO(b"0" * (1024 * 1024 + 1)), filename="big.pdf")
        with pytest.raises(ValidationError):
            storage.upload("sermon-documents", big)
        assert not (tmp_path / "sermon-documents").exists()


class TestUploadRoutes:
    def test_worship_team_uploads_and_file_is_served(self, client, worship_leader, auth_headers):
        res = client.post(
            "/api/storage/song-audio",
            data={"file": (io.BytesIO(b"RIFF"), "chorus.wav")},
            headers=auth_headers(worship_leader),
            content_type="multipart/form-data",
        )
        assert res.status_code == 201
        body = res.get_json()
        assert body["url"].endswith(f"/storage/song-audio/{body['path']}")

        served = client.get(f"/storage/song-audio/{body['path']}")
        assert served.status_code == 200
        assert served.data == b"RIFF"
        served.close()

    def test_member_cannot_upload(self, client, member, auth_headers):
        res = client.post(
            "/api/storage/images",
            data={"file": (io.BytesIO(b"GIF89a"), "me.gif")},
            headers=auth_headers(member),
            content_type="multipart/form-data",
        )
        assert res.status_code == 403

    def test_missing_file(self, client, pastor, auth_headers):
        res = client.post("/api/storage/images", data={}, headers=auth_headers(pastor),
                          content_type="multipart/form-data")
        assert res.status_code == 400
