"""
Vercel serverless function - exposes the gallery admin relay as `app`.
The package lives in backend/, which is not on the function's import path.
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'backend'))

from gallery_admin import create_app  # noqa: E402

app = create_app()
