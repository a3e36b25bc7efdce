"""Request and response models for the ContactKeeper API."""
