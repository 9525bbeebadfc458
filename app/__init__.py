"""
Campus Trust API
Students, colleges and recruiters around credential verification and
job application workflows.

Architecture:
- MongoDB: every entity (colleges, students, recruiters, credentials, applications)
- FastAPI: async handlers, independent queries awaited together
"""

__version__ = "1.0.0"
