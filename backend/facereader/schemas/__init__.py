# Schemas package init
"""
FaceReader Backend — API Schemas

    - common.py:   ErrorResponse, HealthResponse, EndpointInfo
    - analysis.py: Response envelopes for the analysis endpoints
    - share.py:    Compatibility share requests and responses
    - settings.py: Dummy-mode admin setting
"""
