# Routes package init
"""
FaceReader Backend — API Routes Package
=========================================

Route Inventory:
    - analysis.py: POST/GET /api/codi-feedback, /api/compatibility-analysis,
                   /api/condition-analysis, /api/fortune-prediction,
                   /api/personality-analysis, /api/emotion-analysis
    - shares.py:   POST/GET/PATCH /api/compatibility-share,
                   POST /api/compatibility-share/delete
    - admin.py:    GET/POST /api/admin/dummy-settings
    - files.py:    GET /api/files/{path}
    - health.py:   GET /health

Routes stay thin: read the request, call a service, return its result.
"""
