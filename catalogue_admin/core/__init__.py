"""Cross-cutting concerns: configuration, logging, security, errors."""
