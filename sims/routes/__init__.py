"""Flask blueprints for the browser-facing and API-facing endpoints."""
