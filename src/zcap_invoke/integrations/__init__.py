"""Integrations of zcap-invoke with HTTP client libraries."""
