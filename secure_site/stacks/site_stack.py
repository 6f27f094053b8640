"""CDK stack for a single secure static website."""

from typing import Any

import aws_cdk as cdk
from constructs import Construct

from secure_site.cdk_constructs import SecureStaticSite
from secure_site.config import SiteConfig


class SecureSiteStack(cdk.Stack):
  """Stack for a single secure static website."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    site_config: SiteConfig,
    **kwargs: Any,
  ) -> None:
    super().__init__(scope, id, **kwargs)

    acl = site_config.web_acl
    self.site = SecureStaticSite(
      self,
      "Site",
      source_dir=site_config.source_dir,
      bucket_name=site_config.bucket_name,
      index_document=site_config.index_document,
      versioned=site_config.versioned,
      removal_policy=site_config.removal_policy,
      enable_logging=site_config.enable_logging,
      price_class=site_config.price_class,
      spa_fallback=site_config.spa_fallback,
      prune=site_config.prune,
      retain_on_delete=site_config.retain_on_delete,
      invalidate_cache=site_config.invalidate_cache,
      web_acl_name=acl.name,
      default_action=acl.default_action,
      rules=acl.rules,
      metrics_enabled=acl.metrics_enabled,
      sampled_requests_enabled=acl.sampled_requests_enabled,
    )

    cdk.Tags.of(self).add("Project", "secure-static-site")
    cdk.Tags.of(self).add("Site", site_config.name)
    if site_config.owner:
      cdk.Tags.of(self).add("Owner", site_config.owner)
    if site_config.environment:
      cdk.Tags.of(self).add("Environment", site_config.environment)
