"""CloudFront distribution in front of the private site bucket."""

from aws_cdk import Duration
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_cloudfront_origins as origins
from aws_cdk import aws_s3 as s3
from constructs import Construct


class EdgeDistribution(Construct):
  """CloudFront distribution reading the bucket through Origin Access Control."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    bucket: s3.IBucket,
    web_acl_arn: str,
    default_root_object: str = "index.html",
    enable_logging: bool = True,
    price_class: cloudfront.PriceClass = cloudfront.PriceClass.PRICE_CLASS_100,
    spa_fallback: bool = False,
  ) -> None:
    super().__init__(scope, id)

    error_responses = None
    if spa_fallback:
      # Client-side routes are unknown keys to S3 (403 via OAC, 404 otherwise)
      error_responses = [
        cloudfront.ErrorResponse(
          http_status=status,
          response_http_status=200,
          response_page_path=f"/{default_root_object}",
          ttl=Duration.minutes(5),
        )
        for status in (403, 404)
      ]

    self.distribution = cloudfront.Distribution(
      self,
      "Distribution",
      default_behavior=cloudfront.BehaviorOptions(
        origin=origins.S3BucketOrigin.with_origin_access_control(bucket),
        viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
        allowed_methods=cloudfront.AllowedMethods.ALLOW_GET_HEAD,
        cached_methods=cloudfront.CachedMethods.CACHE_GET_HEAD,
        compress=True,
      ),
      default_root_object=default_root_object,
      error_responses=error_responses,
      enable_logging=enable_logging,
      price_class=price_class,
      web_acl_id=web_acl_arn,
    )
