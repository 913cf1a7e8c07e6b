# Routes package init
"""
TourStack Backend — API Routes Package
========================================

Route Inventory:
    - health.py:           GET  /api/health
    - templates.py:        /api/templates          (CRUD)
    - tours.py:            /api/tours              (CRUD, duplicate)
    - stops.py:            /api/stops              (CRUD, reorder)
    - media.py:            /api/media              (uploads, tags, usage, sync)
    - google_translate.py: /api/google-translate   (translate, batch, detect, languages, status)
    - google_tts.py:       /api/google-tts         (voices, generate, preview, files, status)
    - vision.py:           /api/vision/analyze
    - gemini.py:           /api/gemini/analyze

Routes stay thin: read the request, call a service, pick the status code.
Errors are raised as TourStackError subclasses and rendered by the global
handlers in main.py.
"""
