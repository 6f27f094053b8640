"""Upload of the local build output into the site bucket."""

from pathlib import Path

from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_s3_deployment as s3_deploy
from constructs import Construct

from secure_site.config import ConfigError


class SiteAssets(Construct):
  """Syncs a local directory into the bucket on every deploy.

  With ``prune`` on, objects that no longer exist locally are deleted from
  the bucket. ``retain_on_delete`` keeps uploaded objects when this
  construct is later removed from the stack. When a distribution is given,
  ``/*`` is invalidated after each upload.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    source_dir: Path | str,
    bucket: s3.IBucket,
    prune: bool = True,
    retain_on_delete: bool = True,
    distribution: cloudfront.IDistribution | None = None,
  ) -> None:
    super().__init__(scope, id)

    source_dir = Path(source_dir)
    if not source_dir.is_dir():
      raise ConfigError(f"Build output directory {source_dir} does not exist")

    self.deployment = s3_deploy.BucketDeployment(
      self,
      "Deployment",
      sources=[s3_deploy.Source.asset(str(source_dir))],
      destination_bucket=bucket,
      prune=prune,
      retain_on_delete=retain_on_delete,
      distribution=distribution,
      distribution_paths=["/*"] if distribution is not None else None,
    )
