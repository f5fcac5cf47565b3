"""
Waitress WSGI entry point for production deployment.

Usage::

    python wsgi.py

Or register as a Windows Service via NSSM::

    nssm install RecruitFlow "C:\\path\\to\\venv\\Scripts\\python.exe" "C:\\path\\to\\wsgi.py"

Set SECRET_KEY and DATABASE_URL first; the production config refuses
to start with development defaults.
"""

import os

from waitress import serve

from recruitflow import create_app

# Force production config when running via this entry point.
app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == "__main__":
    host = os.environ.get("WAITRESS_HOST", "127.0.0.1")
    port = int(os.environ.get("WAITRESS_PORT", "8080"))
    threads = int(os.environ.get("WAITRESS_THREADS", "8"))
    print(f"Starting Waitress on {host}:{port}")
    serve(app, host=host, port=port, threads=threads)
