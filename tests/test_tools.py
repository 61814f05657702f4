from botocore.exceptions import ClientError

from tools.check_aws import check_aws
from tools.check_bucket_permissions import check_bucket_permissions, TEST_KEY
from tools.find_bucket_region import find_bucket_region
from tools.migrate_to_s3 import migrate_files


def client_error(code, op="Op"):
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


class RecordingS3:
    def __init__(self, fail_keys=(), errors=None):
        self.fail_keys = set(fail_keys)
        self.errors = errors or {}
        self.calls = []

    def _maybe_fail(self, op):
        if op in self.errors:
            raise self.errors[op]

    def put_object(self, **kwargs):
        self.calls.append(("put", kwargs))
        self._maybe_fail("put")
        if kwargs["Key"] in self.fail_keys:
            raise client_error("AccessDenied", "PutObject")

    def get_object(self, Bucket, Key):
        self.calls.append(("get", Key))
        self._maybe_fail("get")

        class Body:
            def read(self):
                return b"ok"
        return {"Body": Body()}

    def delete_object(self, Bucket, Key):
        self.calls.append(("delete", Key))
        self._maybe_fail("delete")

    def list_buckets(self):
        self._maybe_fail("list")
        return {"Buckets": [{"Name": "panoptic-audio"}]}

    def head_bucket(self, Bucket):
        self._maybe_fail("head")


def test_migrate_uploads_every_file(tmp_path):
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    (uploads / "a.mp3").write_bytes(b"a")
    (uploads / "b.wav").write_bytes(b"b")
    s3 = RecordingS3(fail_keys={"audio/a.mp3"})

    migrated, failed = migrate_files(str(uploads), "bucket", s3)

    assert migrated == ["b.wav"]
    assert failed == ["a.mp3"]
    put = dict(s3.calls[1][1])
    assert put["Key"] == "audio/b.wav"
    assert put["Body"] == b"b"
    assert put["Metadata"]["migrated"] == "true"
    assert put["Metadata"]["originalName"] == "b.wav"


def test_migrate_without_uploads_dir(tmp_path):
    assert migrate_files(str(tmp_path / "missing"), "bucket", RecordingS3()) == ([], [])


def test_find_bucket_region_returns_first_success():
    tried = []

    def factory(region):
        tried.append(region)
        s3 = RecordingS3()
        if region != "eu-west-1":
            code = "PermanentRedirect" if region == "us-east-1" else "NoSuchBucket"
            s3.errors["head"] = client_error(code, "HeadBucket")
        return s3

    region = find_bucket_region("bucket", regions=["us-east-1", "us-west-2", "eu-west-1", "sa-east-1"],
                                client_factory=factory)

    assert region == "eu-west-1"
    assert tried == ["us-east-1", "us-west-2", "eu-west-1"]


def test_find_bucket_region_not_found():
    def factory(region):
        return RecordingS3(errors={"head": client_error("403", "HeadBucket")})

    assert find_bucket_region("bucket", regions=["us-east-1"], client_factory=factory) is None


def test_check_aws_success():
    assert check_aws(RecordingS3(), "panoptic-audio") == (True, None)


def test_check_aws_requires_bucket_name():
    assert check_aws(RecordingS3(), None) == (False, None)


def test_check_aws_maps_error_to_hint():
    s3 = RecordingS3(errors={"list": client_error("InvalidAccessKeyId", "ListBuckets")})
    ok, hint = check_aws(s3, "panoptic-audio")
    assert ok is False
    assert "Access Key ID" in hint


def test_bucket_permissions_all_pass():
    s3 = RecordingS3()
    assert check_bucket_permissions(s3, "bucket") == ["upload", "read", "delete"]
    assert s3.calls[-1] == ("delete", TEST_KEY)


def test_bucket_permissions_stop_at_first_failure():
    s3 = RecordingS3(errors={"get": client_error("AccessDenied", "GetObject")})
    assert check_bucket_permissions(s3, "bucket") == ["upload"]
    assert [c[0] for c in s3.calls] == ["put", "get"]
