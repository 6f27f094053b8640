"""CDK constructs for secure static website infrastructure."""

from .distribution import EdgeDistribution
from .site_assets import SiteAssets
from .static_site import SecureStaticSite
from .storage import PrivateSiteBucket
from .web_acl import ManagedRulesWebAcl

__all__ = [
  "EdgeDistribution",
  "ManagedRulesWebAcl",
  "PrivateSiteBucket",
  "SecureStaticSite",
  "SiteAssets",
]
