from .job_processor import TranscriptionJobProcessor, mime_type_for_key

__all__ = ['TranscriptionJobProcessor', 'mime_type_for_key']
