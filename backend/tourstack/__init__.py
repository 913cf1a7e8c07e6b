"""
TourStack Backend — Application Package
=========================================

What: Authoring API for guided museum tours: tours, stops, templates, the
      media library, and proxies to Google Translate, Text-to-Speech,
      Vision and Gemini.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Business Logic, Proxies)│  ← validation, Google calls, files
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
