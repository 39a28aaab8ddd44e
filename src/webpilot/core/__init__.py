"""webpilot core: error hierarchy."""
