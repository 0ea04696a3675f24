"""Cross-cutting infrastructure (structured logging)."""
