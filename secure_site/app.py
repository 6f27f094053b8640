#!/usr/bin/env python3
"""CDK application entry point for secure static website infrastructure."""

import logging
import os
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import aws_cdk as cdk
import boto3

from secure_site.config import Config, SiteConfig
from secure_site.stacks.site_stack import SecureSiteStack

logger = logging.getLogger("secure_site")


def get_account_id() -> str:
  """Get AWS account ID from current credentials."""
  sts = boto3.client("sts")
  return str(sts.get_caller_identity()["Account"])


def resolve_account(site: SiteConfig) -> str:
  """Pick the deployment account: site config, then CDK CLI env, then STS."""
  if site.account:
    return site.account
  return os.environ.get("CDK_DEFAULT_ACCOUNT") or get_account_id()


def build_app(app: cdk.App, config: Config) -> list[SecureSiteStack]:
  """Declare one stack per configured site."""
  stacks = []
  for site in config.sites:
    logger.info("Declaring %s (%s) from %s", site.stack_name, site.region, site.source_dir)
    stacks.append(
      SecureSiteStack(
        app,
        site.stack_name,
        site_config=site,
        env=cdk.Environment(
          account=resolve_account(site),
          region=site.region,
        ),
        description=f"Secure static website (S3 + CloudFront + WAF) for {site.name}",
      )
    )
  return stacks


def main() -> None:
  """Create CDK app with a stack for each configured site."""
  logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(levelname)s %(name)s: %(message)s",
  )
  app = cdk.App()

  # Load configuration
  config_path = app.node.try_get_context("config") or "sites.yaml"
  config = Config.from_yaml(Path(config_path))
  if not config.sites:
    logger.warning("No sites configured in %s", config_path)

  build_app(app, config)
  app.synth()


if __name__ == "__main__":
  main()
