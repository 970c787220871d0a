"""HTTP API 路由."""
