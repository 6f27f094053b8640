"""CDK stacks for secure static website infrastructure."""

from .site_stack import SecureSiteStack

__all__ = ["SecureSiteStack"]
