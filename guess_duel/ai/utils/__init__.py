"""Provider client, prompt templates and retry helpers."""
