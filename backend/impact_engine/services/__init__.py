"""Service layer: derivation engines and orchestration."""
