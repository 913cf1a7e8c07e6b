# Services package init
"""
TourStack Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the database / Google APIs.
How:   Each service is a class with a module-level singleton; routes get it
       through a `get_*_service` dependency so tests can swap it out.

Service Inventory:
    - TemplateService:        templates CRUD + built-in template seeding
    - TourService:            tours CRUD + duplicate
    - StopService:            stops CRUD + reorder, QR positioning records
    - MediaService:           media library (upload, tags, usage, disk sync)
    - FileService:            uploads directory (validate, write, delete, scan)
    - GoogleAPIClient:        shared httpx plumbing for the Google REST APIs
    - GoogleTranslateService: Translation v2 proxy
    - GoogleTTSService:       Text-to-Speech v1 proxy + generated audio library
    - VisionService:          Vision v1 proxy
    - GeminiService:          image analysis through google-generativeai
"""
