"""Output processors for pipeline bundles."""
