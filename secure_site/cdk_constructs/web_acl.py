"""WAFv2 Web ACL built from managed rule groups."""

from collections.abc import Sequence

from aws_cdk import Annotations, Stack, Token
from aws_cdk import aws_wafv2 as wafv2
from constructs import Construct

from secure_site.config import ManagedRuleConfig, check_priorities, default_managed_rules

# CLOUDFRONT-scoped ACLs can only be created in this region
CLOUDFRONT_WAF_REGION = "us-east-1"


class ManagedRulesWebAcl(Construct):
  """CloudFront-scoped Web ACL made of vendor-managed rule groups.

  Rules are evaluated lowest priority first; each rule's override action
  decides whether the group's own block/allow verdicts apply (``none``) or
  are only counted (``count``). Requests no rule terminates get
  ``default_action``.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    name: str = "WebsiteACL",
    default_action: str = "allow",
    rules: Sequence[ManagedRuleConfig] | None = None,
    metrics_enabled: bool = True,
    sampled_requests_enabled: bool = True,
  ) -> None:
    super().__init__(scope, id)

    if rules is None:
      rules = default_managed_rules()
    check_priorities(list(rules), context=name)
    if default_action not in ("allow", "block"):
      raise ValueError(f"default_action must be allow or block, got {default_action!r}")

    region = Stack.of(self).region
    if not Token.is_unresolved(region) and region != CLOUDFRONT_WAF_REGION:
      Annotations.of(self).add_error(
        f"CloudFront Web ACLs must be deployed in {CLOUDFRONT_WAF_REGION}, not {region}"
      )

    self.rules = sorted(rules, key=lambda r: r.priority)

    self.web_acl = wafv2.CfnWebACL(
      self,
      "WebAcl",
      scope="CLOUDFRONT",
      default_action=_default_action(default_action),
      visibility_config=wafv2.CfnWebACL.VisibilityConfigProperty(
        cloud_watch_metrics_enabled=metrics_enabled,
        metric_name=name,
        sampled_requests_enabled=sampled_requests_enabled,
      ),
      rules=[
        build_rule(r, metrics_enabled, sampled_requests_enabled) for r in self.rules
      ],
    )

  @property
  def arn(self) -> str:
    return self.web_acl.attr_arn


def _default_action(action: str) -> wafv2.CfnWebACL.DefaultActionProperty:
  if action == "block":
    return wafv2.CfnWebACL.DefaultActionProperty(block=wafv2.CfnWebACL.BlockActionProperty())
  return wafv2.CfnWebACL.DefaultActionProperty(allow=wafv2.CfnWebACL.AllowActionProperty())


def build_rule(
  rule: ManagedRuleConfig,
  metrics_enabled: bool = True,
  sampled_requests_enabled: bool = True,
) -> wafv2.CfnWebACL.RuleProperty:
  """Translate a managed rule reference into a CfnWebACL rule."""
  overrides = [
    wafv2.CfnWebACL.RuleActionOverrideProperty(
      name=excluded,
      action_to_use=wafv2.CfnWebACL.RuleActionProperty(
        count=wafv2.CfnWebACL.CountActionProperty()
      ),
    )
    for excluded in rule.excluded_rules
  ]

  if rule.override_action == "count":
    override_action = wafv2.CfnWebACL.OverrideActionProperty(count={})
  else:
    override_action = wafv2.CfnWebACL.OverrideActionProperty(none={})

  return wafv2.CfnWebACL.RuleProperty(
    name=rule.rule_name,
    priority=rule.priority,
    statement=wafv2.CfnWebACL.StatementProperty(
      managed_rule_group_statement=wafv2.CfnWebACL.ManagedRuleGroupStatementProperty(
        vendor_name=rule.vendor,
        name=rule.rule_group,
        rule_action_overrides=overrides or None,
      )
    ),
    override_action=override_action,
    visibility_config=wafv2.CfnWebACL.VisibilityConfigProperty(
      cloud_watch_metrics_enabled=metrics_enabled,
      metric_name=rule.metric,
      sampled_requests_enabled=sampled_requests_enabled,
    ),
  )
