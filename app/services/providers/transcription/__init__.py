"""Transcription adapters: OpenAI Whisper, self-hosted Whisper and placeholder cloud services."""
