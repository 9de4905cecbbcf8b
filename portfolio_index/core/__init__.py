"""Cross-cutting helpers: errors, logging and telemetry."""
