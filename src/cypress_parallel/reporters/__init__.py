"""Human-readable reporting for local runs."""
