"""HTTP integration: middleware, dependencies and the application factory."""
