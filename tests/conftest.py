"""Pytest fixtures for CDK construct tests."""

from pathlib import Path

import aws_cdk as cdk
import pytest


@pytest.fixture
def app() -> cdk.App:
  """Create a CDK App for testing."""
  return cdk.App()


@pytest.fixture
def stack(app: cdk.App) -> cdk.Stack:
  """Create a CDK Stack for testing."""
  return cdk.Stack(app, "TestStack", env=cdk.Environment(region="us-east-1"))


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
  """Create a minimal build output directory."""
  dist = tmp_path / "dist"
  (dist / "assets").mkdir(parents=True)
  (dist / "index.html").write_text("<html><body>hello</body></html>")
  (dist / "assets" / "app.js").write_text("console.log('hi');")
  return dist
