"""Shared utilities: telemetry and other cross-cutting helpers. No business logic."""
