"""
Pipeline processors: Implementation modules for the shorts pipeline.

This module contains:
- media: Container demux / stream selection / mux / packet relay (trim, extract audio, burn)
- subtitle: Subtitle style encoding (filter expression)
- asr: Speech-to-text collaborator (whisper CLI)
"""
