# Services package init
"""
FaceReader Backend — Services Layer
=====================================

What:  Business logic between the routes (HTTP) and storage, database and model.
How:   Module-level singletons, injected into routes through FastAPI
       dependencies so tests can override them.

Service Inventory:
    - LLMService (abstract): prompt + images → completion text
    - GeminiService:         Google Gemini implementation (retry + circuit breaker)
    - FileService:           Upload validation, storage, public URLs, JSON documents
    - ImageService:          HEIC detection/conversion, remote image fetch
    - PromptService:         Prompt templates and response language
    - SettingsService:       Dummy-mode switch and canned responses
    - ShareService:          Compatibility result sharing
    - AnalysisService:       The analysis workflow for every endpoint
"""
