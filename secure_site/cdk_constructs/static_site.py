"""Main composite construct for a secure static website."""

from collections.abc import Sequence
from pathlib import Path

from aws_cdk import CfnOutput, RemovalPolicy
from aws_cdk import aws_cloudfront as cloudfront
from constructs import Construct

from secure_site.config import ManagedRuleConfig

from .distribution import EdgeDistribution
from .site_assets import SiteAssets
from .storage import PrivateSiteBucket
from .web_acl import ManagedRulesWebAcl


class SecureStaticSite(Construct):
  """Complete secure static website infrastructure.

  Creates:
  - Private, encrypted, versioned S3 bucket for the site files
  - Upload of the local build output into the bucket
  - WAFv2 Web ACL built from managed rule groups
  - CloudFront distribution reading the bucket via Origin Access Control,
    protected by the Web ACL
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    source_dir: Path | str,
    bucket_name: str | None = None,
    index_document: str = "index.html",
    versioned: bool = True,
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY,
    enable_logging: bool = True,
    price_class: cloudfront.PriceClass = cloudfront.PriceClass.PRICE_CLASS_100,
    spa_fallback: bool = False,
    prune: bool = True,
    retain_on_delete: bool = True,
    invalidate_cache: bool = True,
    web_acl_name: str = "WebsiteACL",
    default_action: str = "allow",
    rules: Sequence[ManagedRuleConfig] | None = None,
    metrics_enabled: bool = True,
    sampled_requests_enabled: bool = True,
  ) -> None:
    super().__init__(scope, id)

    self.bucket = PrivateSiteBucket(
      self,
      "Storage",
      bucket_name=bucket_name,
      versioned=versioned,
      removal_policy=removal_policy,
    )

    self.web_acl = ManagedRulesWebAcl(
      self,
      "Firewall",
      name=web_acl_name,
      default_action=default_action,
      rules=rules,
      metrics_enabled=metrics_enabled,
      sampled_requests_enabled=sampled_requests_enabled,
    )

    # References to the bucket and the ACL ARN order the distribution after both
    self.distribution = EdgeDistribution(
      self,
      "Edge",
      bucket=self.bucket.bucket,
      web_acl_arn=self.web_acl.arn,
      default_root_object=index_document,
      enable_logging=enable_logging,
      price_class=price_class,
      spa_fallback=spa_fallback,
    )

    self.assets = SiteAssets(
      self,
      "Assets",
      source_dir=source_dir,
      bucket=self.bucket.bucket,
      prune=prune,
      retain_on_delete=retain_on_delete,
      distribution=self.distribution.distribution if invalidate_cache else None,
    )

    # Outputs
    CfnOutput(
      self,
      "BucketName",
      value=self.bucket.bucket.bucket_name,
      description="S3 bucket name",
    )
    CfnOutput(
      self,
      "DistributionId",
      value=self.distribution.distribution.distribution_id,
      description="CloudFront distribution ID",
    )
    CfnOutput(
      self,
      "DistributionDomainName",
      value=self.distribution.distribution.distribution_domain_name,
      description="CloudFront distribution domain name",
    )
    CfnOutput(
      self,
      "WebAclArn",
      value=self.web_acl.arn,
      description="WAF Web ACL ARN",
    )
