"""Configuration loader for secure static sites."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from aws_cdk import RemovalPolicy
from aws_cdk import aws_cloudfront as cloudfront

logger = logging.getLogger(__name__)

REMOVAL_POLICIES = {
  "retain": RemovalPolicy.RETAIN,
  "destroy": RemovalPolicy.DESTROY,
  "snapshot": RemovalPolicy.SNAPSHOT,
}

PRICE_CLASSES = {
  "100": cloudfront.PriceClass.PRICE_CLASS_100,
  "200": cloudfront.PriceClass.PRICE_CLASS_200,
  "all": cloudfront.PriceClass.PRICE_CLASS_ALL,
}

DEFAULT_ACTIONS = ("allow", "block")
OVERRIDE_ACTIONS = ("none", "count")


class ConfigError(ValueError):
  """Raised when sites.yaml describes an invalid site."""


@dataclass
class ManagedRuleConfig:
  """A reference to a vendor-managed WAF rule group."""

  rule_group: str
  priority: int
  vendor: str = "AWS"
  override_action: str = "none"
  excluded_rules: list[str] = field(default_factory=list)
  name: str | None = None
  metric_name: str | None = None

  @property
  def rule_name(self) -> str:
    return self.name or f"{self.vendor}-{self.rule_group}"

  @property
  def metric(self) -> str:
    if self.metric_name:
      return self.metric_name
    return self.rule_group.removeprefix("AWSManagedRules") or self.rule_group


def default_managed_rules() -> list[ManagedRuleConfig]:
  """Managed rule groups applied when a site configures none."""
  return [
    # OWASP-style protections (XSS, bad headers, oversized bodies)
    ManagedRuleConfig("AWSManagedRulesCommonRuleSet", 1),
    # Proxies, VPNs, Tor exit nodes
    ManagedRuleConfig("AWSManagedRulesAnonymousIpList", 2),
    ManagedRuleConfig("AWSManagedRulesAmazonIpReputationList", 3),
    ManagedRuleConfig("AWSManagedRulesKnownBadInputsRuleSet", 4),
    ManagedRuleConfig("AWSManagedRulesSQLiRuleSet", 5),
  ]


@dataclass
class WebAclConfig:
  """Configuration for the CloudFront-scoped Web ACL."""

  name: str = "WebsiteACL"
  default_action: str = "allow"
  metrics_enabled: bool = True
  sampled_requests_enabled: bool = True
  rules: list[ManagedRuleConfig] = field(default_factory=default_managed_rules)


@dataclass
class SiteConfig:
  """Configuration for a single secure static site."""

  name: str
  source_dir: Path = Path("dist")
  region: str = "us-east-1"
  account: str | None = None
  owner: str | None = None
  environment: str | None = None
  bucket_name: str | None = None
  index_document: str = "index.html"
  versioned: bool = True
  removal_policy: RemovalPolicy = RemovalPolicy.DESTROY
  enable_logging: bool = True
  price_class: cloudfront.PriceClass = cloudfront.PriceClass.PRICE_CLASS_100
  spa_fallback: bool = False
  prune: bool = True
  retain_on_delete: bool = True
  invalidate_cache: bool = True
  web_acl: WebAclConfig = field(default_factory=WebAclConfig)

  @property
  def stack_name(self) -> str:
    return f"SecureSite-{self.name}"


@dataclass
class Config:
  """Multi-site configuration."""

  sites: list[SiteConfig] = field(default_factory=list)

  @classmethod
  def from_yaml(cls, path: Path | str = "sites.yaml") -> "Config":
    """Load configuration from YAML file.

    Relative ``source_dir`` values are resolved against the directory that
    holds the YAML file, so ``cdk`` can be run from anywhere.
    """
    path = Path(path)
    with open(path) as f:
      data = yaml.safe_load(f) or {}

    defaults = data.get("defaults", {})
    sites: list[SiteConfig] = []

    for site_data in data.get("sites", []):
      # Merge defaults with site-specific config
      merged = {**defaults, **site_data}
      site = parse_site(merged, base_dir=path.parent)
      logger.debug("Loaded site %s from %s", site.name, path)
      sites.append(site)

    names = [s.name for s in sites]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
      raise ConfigError(f"Duplicate site names: {', '.join(duplicates)}")

    return cls(sites=sites)


def parse_site(data: dict[str, Any], base_dir: Path = Path(".")) -> SiteConfig:
  """Build a SiteConfig from a merged mapping."""
  name = data.get("name")
  if not name:
    raise ConfigError("Every site needs a 'name'")

  removal_policy_str = str(data.get("removal_policy", "destroy")).lower()
  if removal_policy_str not in REMOVAL_POLICIES:
    raise ConfigError(f"{name}: unknown removal_policy '{removal_policy_str}'")

  price_class_str = str(data.get("price_class", "100")).lower()
  if price_class_str not in PRICE_CLASSES:
    raise ConfigError(f"{name}: unknown price_class '{price_class_str}'")

  source_dir = Path(data.get("source_dir", "dist"))
  if not source_dir.is_absolute():
    source_dir = base_dir / source_dir

  return SiteConfig(
    name=name,
    source_dir=source_dir,
    region=data.get("region", "us-east-1"),
    account=str(data["account"]) if data.get("account") else None,
    owner=data.get("owner"),
    environment=data.get("environment"),
    bucket_name=data.get("bucket_name"),
    index_document=data.get("index_document", "index.html"),
    versioned=data.get("versioned", True),
    removal_policy=REMOVAL_POLICIES[removal_policy_str],
    enable_logging=data.get("enable_logging", True),
    price_class=PRICE_CLASSES[price_class_str],
    spa_fallback=data.get("spa_fallback", False),
    prune=data.get("prune", True),
    retain_on_delete=data.get("retain_on_delete", True),
    invalidate_cache=data.get("invalidate_cache", True),
    web_acl=parse_web_acl(name, data.get("web_acl") or {}),
  )


def parse_web_acl(site_name: str, data: dict[str, Any]) -> WebAclConfig:
  """Build a WebAclConfig, falling back to the default managed rules."""
  default_action = str(data.get("default_action", "allow")).lower()
  if default_action not in DEFAULT_ACTIONS:
    raise ConfigError(f"{site_name}: web_acl.default_action must be allow or block")

  if "rules" in data:
    if not isinstance(data["rules"], list):
      raise ConfigError(f"{site_name}: web_acl.rules must be a list of rules")
    rules = [_parse_rule(site_name, r) for r in data["rules"]]
  else:
    rules = default_managed_rules()
  check_priorities(rules, context=site_name)

  return WebAclConfig(
    name=data.get("name", "WebsiteACL"),
    default_action=default_action,
    metrics_enabled=data.get("metrics_enabled", True),
    sampled_requests_enabled=data.get("sampled_requests_enabled", True),
    rules=rules,
  )


def _parse_rule(site_name: str, data: Any) -> ManagedRuleConfig:
  if not isinstance(data, dict) or "rule_group" not in data or "priority" not in data:
    raise ConfigError(f"{site_name}: each web_acl rule needs rule_group and priority")

  rule_group = data["rule_group"]
  priority = data["priority"]
  # YAML booleans are ints in Python; floats would be truncated
  if not isinstance(priority, int) or isinstance(priority, bool):
    raise ConfigError(f"{site_name}: rule {rule_group} priority must be an integer")

  excluded_rules = data.get("excluded_rules", [])
  if not isinstance(excluded_rules, list) or not all(
    isinstance(r, str) for r in excluded_rules
  ):
    raise ConfigError(
      f"{site_name}: rule {rule_group} excluded_rules must be a list of rule names"
    )

  override_action = str(data.get("override_action", "none")).lower()
  if override_action not in OVERRIDE_ACTIONS:
    raise ConfigError(
      f"{site_name}: rule {rule_group} override_action must be none or count"
    )

  return ManagedRuleConfig(
    rule_group=rule_group,
    priority=priority,
    vendor=data.get("vendor", "AWS"),
    override_action=override_action,
    excluded_rules=list(excluded_rules),
    name=data.get("name"),
    metric_name=data.get("metric_name"),
  )


def check_priorities(rules: list[ManagedRuleConfig], context: str = "web_acl") -> None:
  """Reject rule lists with repeated names or non-distinct, negative priorities."""
  seen: dict[int, str] = {}
  names: set[str] = set()
  for rule in rules:
    if rule.rule_name in names:
      raise ConfigError(f"{context}: rule name {rule.rule_name} is used more than once")
    names.add(rule.rule_name)
    if rule.priority < 0:
      raise ConfigError(f"{context}: priority of {rule.rule_name} must not be negative")
    if rule.priority in seen:
      raise ConfigError(
        f"{context}: {rule.rule_name} and {seen[rule.priority]} "
        f"share priority {rule.priority}"
      )
    seen[rule.priority] = rule.rule_name
