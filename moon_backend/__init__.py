"""
Backend package for the Maison de Verre moon guide.

Contains the FastAPI application plus the provider clients
(Gemini, OpenAI) and the offline keyword responder it falls back to.
"""
