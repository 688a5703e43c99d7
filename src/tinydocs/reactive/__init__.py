"""Live preview engine: asset store, reload broadcaster, and rebuild pipeline."""
