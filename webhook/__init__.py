from __future__ import annotations  # Re-export webhook public API

from .client import HttpClient, HttpResponse, WebhookError, WebhookRoute, WebhookTimeout, forward, multipart_parts, unwrap

__all__ = ["HttpClient", "HttpResponse", "WebhookError", "WebhookRoute", "WebhookTimeout", "forward", "multipart_parts", "unwrap"]
