"""
Answer Grading Pipeline
grading/

Steps:
1. Transcription Dispatcher — image → OCR endpoint, audio → speech-to-text endpoint
2. Similarity Scorer        — local positional character-match score (audit value)
3. Grading Pipeline         — per-answer records + quiz aggregate
"""
