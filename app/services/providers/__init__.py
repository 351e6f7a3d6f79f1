"""
Provider adapters for both capability families.

- base.py: capability contracts and shared helpers
- registry.py: ProviderContext -> adapter
- generation/: OpenAI, Anthropic, Gemini, Ollama
- transcription/: OpenAI Whisper, self-hosted Whisper, Google and AWS placeholders
"""
