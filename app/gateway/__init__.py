"""AI Content-Generation Gateway.

Async request-brokering layer in front of the generative backends:
  - Response Cache keyed by request fingerprint (SHA-256)
  - Per-client Rate Limiter (fixed window)
  - Concurrency Queue (global cap on in-flight provider calls)
  - Provider Adapters (Mistral, Gemini, Anthropic, Cohere)
  - Cross-Check orchestrator (second opinions from non-primary providers)
"""
