"""Core types for the Image Upload Service."""
