"""HTTP API exposing health checks and translation previews."""
