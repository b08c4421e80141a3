"""
Services package - Core business logic and integrations

Organized by domain responsibility:

Pipeline (Course Generation Flow):
    - pipeline/extraction.py, photos.py: input preparation
    - pipeline/script_generation: segments + quiz questions
    - pipeline/audio: narration providers and synthesizer
    - pipeline/scenes.py: timed scene segmentation
    - pipeline/video: video job providers, ladders and synthesizer
    - pipeline/orchestrator.py: stage sequencing, progress, failure policy

Infrastructure (Technical Concerns):
    - llm: content-generation providers (Gemini, Anthropic, Ollama)
    - infrastructure/storage: object storage and course repository
    - infrastructure/orchestration: job tracking and provider job polling
    - infrastructure/parsing: JSON recovery from LLM output

Use Cases (Application Layer):
    - use_cases: job lifecycle around one pipeline run
"""
