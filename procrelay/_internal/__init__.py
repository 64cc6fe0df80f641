"""Internal APIs, not covered by versioning policy."""
