"""Pydantic Schemas — API request/response models and persisted-row validation."""
