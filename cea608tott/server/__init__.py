"""HTTP API: one-shot conversions and live caption streams over FastAPI."""
