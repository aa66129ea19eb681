"""Storage backends: remote SQL store, local fallback cache and the policy joining them."""
