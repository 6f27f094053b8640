"""Tests for the asset sync preview script."""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

# Add scripts to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "scripts"))

from preview_sync import (  # noqa: E402
  SyncPlan,
  get_bucket_name,
  list_local,
  list_remote,
  main,
  plan_sync,
  print_plan,
)


class TestPlanSync:
  """Tests for plan_sync."""

  def test_no_changes_is_noop(self) -> None:
    local = {"index.html": 10, "app.js": 20}

    plan = plan_sync(local, dict(local))

    assert plan.is_noop
    assert plan.unchanged == ["app.js", "index.html"]

  def test_new_and_changed(self) -> None:
    plan = plan_sync({"index.html": 12, "about.html": 5}, {"index.html": 10})

    assert plan.new == ["about.html"]
    assert plan.changed == ["index.html"]
    assert not plan.is_noop

  def test_removed_file_deleted_when_pruning(self) -> None:
    plan = plan_sync({"index.html": 10}, {"index.html": 10, "old.html": 3}, prune=True)

    assert plan.deleted == ["old.html"]
    assert plan.kept == []
    assert not plan.is_noop

  def test_removed_file_kept_without_pruning(self) -> None:
    plan = plan_sync({"index.html": 10}, {"index.html": 10, "old.html": 3}, prune=False)

    assert plan.deleted == []
    assert plan.kept == ["old.html"]
    assert plan.is_noop

  def test_empty_plan(self) -> None:
    assert SyncPlan().is_noop


class TestListLocal:
  """Tests for list_local."""

  def test_keys_use_forward_slashes(self, site_dir: Path) -> None:
    objects = list_local(site_dir)

    assert set(objects) == {"index.html", "assets/app.js"}
    assert objects["index.html"] == (site_dir / "index.html").stat().st_size


class TestListRemote:
  """Tests for list_remote."""

  def test_collects_all_pages(self) -> None:
    mock_s3 = MagicMock()
    mock_s3.get_paginator.return_value.paginate.return_value = [
      {"Contents": [{"Key": "index.html", "Size": 10}]},
      {"Contents": [{"Key": "assets/app.js", "Size": 20}]},
      {},
    ]

    objects = list_remote(mock_s3, "site-bucket")

    assert objects == {"index.html": 10, "assets/app.js": 20}
    mock_s3.get_paginator.assert_called_once_with("list_objects_v2")
    mock_s3.get_paginator.return_value.paginate.assert_called_once_with(Bucket="site-bucket")


class TestGetBucketName:
  """Tests for get_bucket_name."""

  def test_reads_bucket_output(self) -> None:
    mock_cfn = MagicMock()
    mock_cfn.describe_stacks.return_value = {
      "Stacks": [
        {
          "Outputs": [
            {
              "OutputKey": "SiteDistributionIdABC",
              "OutputValue": "E123",
              "Description": "CloudFront distribution ID",
            },
            {
              "OutputKey": "SiteBucketNameDEF",
              "OutputValue": "site-bucket",
              "Description": "S3 bucket name",
            },
          ]
        }
      ]
    }

    with patch("preview_sync.boto3") as mock_boto3:
      mock_boto3.client.return_value = mock_cfn
      bucket = get_bucket_name("SecureSite-aleeza", "us-east-1")

    assert bucket == "site-bucket"
    mock_boto3.client.assert_called_once_with("cloudformation", region_name="us-east-1")
    mock_cfn.describe_stacks.assert_called_once_with(StackName="SecureSite-aleeza")

  def test_missing_output(self) -> None:
    mock_cfn = MagicMock()
    mock_cfn.describe_stacks.return_value = {"Stacks": [{"Outputs": []}]}

    with patch("preview_sync.boto3") as mock_boto3:
      mock_boto3.client.return_value = mock_cfn
      with pytest.raises(LookupError, match="no bucket name output"):
        get_bucket_name("SecureSite-aleeza")


class TestPrintPlan:
  """Tests for the plan summary."""

  def test_in_sync(self, capsys: pytest.CaptureFixture[str]) -> None:
    print_plan(plan_sync({"index.html": 10}, {"index.html": 10}))

    assert "✓ Bucket already matches the build output" in capsys.readouterr().out

  def test_kept_objects_are_not_reported_as_matching(
    self, capsys: pytest.CaptureFixture[str]
  ) -> None:
    print_plan(plan_sync({"index.html": 10}, {"index.html": 10, "old.html": 3}, prune=False))
    out = capsys.readouterr().out

    assert "keep  old.html" in out
    assert "already matches" not in out
    assert "1 objects not in the build output are kept" in out

  def test_summary_counts_kept(self, capsys: pytest.CaptureFixture[str]) -> None:
    print_plan(plan_sync({"new.html": 1}, {"old.html": 3}, prune=False))

    assert "1 to upload, 0 to overwrite, 0 to delete, 0 unchanged, 1 kept" in (
      capsys.readouterr().out
    )


def _clients(cloudformation: MagicMock, s3_client: MagicMock) -> MagicMock:
  mock_boto3 = MagicMock()
  mock_boto3.client.side_effect = lambda service, **_: {
    "cloudformation": cloudformation,
    "s3": s3_client,
  }[service]
  return mock_boto3


class TestMain:
  """Tests for the command-line entry point."""

  @pytest.fixture
  def cloudformation(self) -> MagicMock:
    mock_cfn = MagicMock()
    mock_cfn.describe_stacks.return_value = {
      "Stacks": [
        {"Outputs": [{"OutputValue": "site-bucket", "Description": "S3 bucket name"}]}
      ]
    }
    return mock_cfn

  @pytest.fixture
  def s3_client(self) -> MagicMock:
    mock_s3 = MagicMock()
    mock_s3.get_paginator.return_value.paginate.return_value = [
      {
        "Contents": [
          {"Key": "index.html", "Size": 1},
          {"Key": "old.html", "Size": 3},
        ]
      }
    ]
    return mock_s3

  def _run(self, monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["preview_sync.py", *args])
    main()

  def test_prints_upload_and_delete(
    self,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    site_dir: Path,
    cloudformation: MagicMock,
    s3_client: MagicMock,
  ) -> None:
    with patch("preview_sync.boto3", _clients(cloudformation, s3_client)):
      self._run(monkeypatch, "SecureSite-aleeza", "--source-dir", str(site_dir))
    out = capsys.readouterr().out

    assert "Bucket: site-bucket" in out
    assert "upload  assets/app.js" in out
    assert "overwrite  index.html" in out
    assert "delete  old.html" in out
    s3_client.get_paginator.return_value.paginate.assert_called_once_with(Bucket="site-bucket")

  def test_no_prune_keeps_objects(
    self,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    site_dir: Path,
    cloudformation: MagicMock,
    s3_client: MagicMock,
  ) -> None:
    with patch("preview_sync.boto3", _clients(cloudformation, s3_client)):
      self._run(monkeypatch, "SecureSite-aleeza", "--source-dir", str(site_dir), "--no-prune")
    out = capsys.readouterr().out

    assert "keep  old.html" in out
    assert "delete  old.html" not in out

  def test_aws_error_exits_1(
    self,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    site_dir: Path,
    s3_client: MagicMock,
  ) -> None:
    mock_cfn = MagicMock()
    mock_cfn.describe_stacks.side_effect = ClientError(
      {"Error": {"Code": "ValidationError", "Message": "Stack does not exist"}},
      "DescribeStacks",
    )

    with patch("preview_sync.boto3", _clients(mock_cfn, s3_client)):
      with pytest.raises(SystemExit) as exc_info:
        self._run(monkeypatch, "SecureSite-missing", "--source-dir", str(site_dir))

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "Error reading bucket for SecureSite-missing" in err
    assert "Stack does not exist" in err

  def test_missing_output_exits_1(
    self,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    site_dir: Path,
    s3_client: MagicMock,
  ) -> None:
    mock_cfn = MagicMock()
    mock_cfn.describe_stacks.return_value = {"Stacks": [{"Outputs": []}]}

    with patch("preview_sync.boto3", _clients(mock_cfn, s3_client)):
      with pytest.raises(SystemExit) as exc_info:
        self._run(monkeypatch, "SecureSite-aleeza", "--source-dir", str(site_dir))

    assert exc_info.value.code == 1
    assert "no bucket name output" in capsys.readouterr().err

  def test_missing_source_dir_exits_1(
    self,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
  ) -> None:
    with patch("preview_sync.boto3") as mock_boto3:
      with pytest.raises(SystemExit) as exc_info:
        self._run(monkeypatch, "SecureSite-aleeza", "--source-dir", str(tmp_path / "missing"))

    assert exc_info.value.code == 1
    assert "is not a directory" in capsys.readouterr().err
    mock_boto3.client.assert_not_called()
