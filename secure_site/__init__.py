"""Secure static website infrastructure (S3 + CloudFront + WAF)."""
