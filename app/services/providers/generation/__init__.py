"""Question-generation adapters: OpenAI, Anthropic, Gemini and Ollama."""
