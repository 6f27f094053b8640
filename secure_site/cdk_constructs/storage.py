"""Private S3 bucket holding the built site."""

from aws_cdk import RemovalPolicy
from aws_cdk import aws_s3 as s3
from constructs import Construct


class PrivateSiteBucket(Construct):
  """Encrypted, versioned S3 bucket that is never publicly reachable.

  Objects are only served through CloudFront Origin Access Control, which
  adds its own bucket policy statement when the distribution is created.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    bucket_name: str | None = None,
    versioned: bool = True,
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY,
  ) -> None:
    super().__init__(scope, id)

    self.bucket = s3.Bucket(
      self,
      "Bucket",
      bucket_name=bucket_name,
      encryption=s3.BucketEncryption.S3_MANAGED,
      access_control=s3.BucketAccessControl.PRIVATE,
      block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
      versioned=versioned,
      enforce_ssl=True,
      removal_policy=removal_policy,
      auto_delete_objects=removal_policy == RemovalPolicy.DESTROY,
    )
