#!/usr/bin/env python3
"""Preview what the next deploy will upload to and prune from a site bucket."""

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import ClientError

BUCKET_OUTPUT_DESCRIPTION = "S3 bucket name"


@dataclass
class SyncPlan:
  """Differences between the local build output and the bucket."""

  new: list[str] = field(default_factory=list)
  changed: list[str] = field(default_factory=list)
  unchanged: list[str] = field(default_factory=list)
  deleted: list[str] = field(default_factory=list)
  kept: list[str] = field(default_factory=list)

  @property
  def is_noop(self) -> bool:
    return not (self.new or self.changed or self.deleted)


def list_local(source_dir: Path) -> dict[str, int]:
  """Map object keys to sizes for every file under source_dir."""
  objects: dict[str, int] = {}
  for path in sorted(source_dir.rglob("*")):
    if path.is_file():
      key = path.relative_to(source_dir).as_posix()
      objects[key] = path.stat().st_size
  return objects


def list_remote(s3_client: Any, bucket: str) -> dict[str, int]:
  """Map object keys to sizes for every current object in the bucket."""
  objects: dict[str, int] = {}
  paginator = s3_client.get_paginator("list_objects_v2")
  for page in paginator.paginate(Bucket=bucket):
    for obj in page.get("Contents", []):
      objects[obj["Key"]] = obj["Size"]
  return objects


def plan_sync(local: dict[str, int], remote: dict[str, int], prune: bool = True) -> SyncPlan:
  """Classify keys the way `aws s3 sync [--delete]` would treat them.

  Size is the only change signal available without downloading objects.
  """
  plan = SyncPlan()
  for key in sorted(local):
    if key not in remote:
      plan.new.append(key)
    elif remote[key] != local[key]:
      plan.changed.append(key)
    else:
      plan.unchanged.append(key)

  for key in sorted(set(remote) - set(local)):
    if prune:
      plan.deleted.append(key)
    else:
      plan.kept.append(key)
  return plan


def get_bucket_name(stack_name: str, region: str = "us-east-1") -> str:
  """Read the site bucket name from the stack outputs.

  Args:
    stack_name: The CDK stack name (e.g., 'SecureSite-aleeza')
    region: AWS region

  Raises:
    LookupError: If the stack has no bucket name output
  """
  cloudformation = boto3.client("cloudformation", region_name=region)
  response = cloudformation.describe_stacks(StackName=stack_name)
  for output in response["Stacks"][0].get("Outputs", []):
    if output.get("Description") == BUCKET_OUTPUT_DESCRIPTION:
      return str(output["OutputValue"])
  raise LookupError(f"Stack {stack_name} has no bucket name output")


def print_plan(plan: SyncPlan) -> None:
  """Print the plan grouped by action."""
  for label, keys in (
    ("upload", plan.new),
    ("overwrite", plan.changed),
    ("delete", plan.deleted),
    ("keep", plan.kept),
  ):
    for key in keys:
      print(f"{label:>9}  {key}")

  print()
  if plan.is_noop and not plan.kept:
    print("✓ Bucket already matches the build output")
  elif plan.is_noop:
    print(f"✓ Nothing to upload; {len(plan.kept)} objects not in the build output are kept")
  else:
    summary = (
      f"{len(plan.new)} to upload, {len(plan.changed)} to overwrite, "
      f"{len(plan.deleted)} to delete, {len(plan.unchanged)} unchanged"
    )
    if plan.kept:
      summary += f", {len(plan.kept)} kept"
    print(summary)


def main() -> None:
  """Main entry point."""
  parser = argparse.ArgumentParser(
    description="Preview the asset sync for a deployed secure static site"
  )
  parser.add_argument(
    "stack_name",
    help="CDK stack name (e.g., SecureSite-aleeza)",
  )
  parser.add_argument(
    "--source-dir",
    default="dist",
    help="Local build output directory (default: dist)",
  )
  parser.add_argument(
    "--region",
    default=os.environ.get("AWS_REGION", "us-east-1"),
    help="AWS region (default: us-east-1)",
  )
  parser.add_argument(
    "--no-prune",
    action="store_true",
    help="Preview a sync that keeps objects missing locally",
  )

  args = parser.parse_args()

  source_dir = Path(args.source_dir)
  if not source_dir.is_dir():
    print(f"Error: {source_dir} is not a directory", file=sys.stderr)
    sys.exit(1)

  try:
    bucket = get_bucket_name(args.stack_name, args.region)
    remote = list_remote(boto3.client("s3", region_name=args.region), bucket)
  except (ClientError, LookupError) as e:
    print(f"Error reading bucket for {args.stack_name}: {e}", file=sys.stderr)
    sys.exit(1)

  print(f"Bucket: {bucket}")
  print_plan(plan_sync(list_local(source_dir), remote, prune=not args.no_prune))


if __name__ == "__main__":
  main()
