#!/usr/bin/env python
"""
Backend startup script - Run FastAPI with Uvicorn
Execute from project root: python run_backend.py
"""
import subprocess
import sys
import os

# Ensure we're running from the project root
project_root = os.path.dirname(os.path.abspath(__file__))
os.chdir(project_root)

# Put src/ on PYTHONPATH so the uvicorn subprocess can import plagiarism_engine without an install
env = os.environ.copy()
env['PYTHONPATH'] = os.pathsep.join(p for p in (os.path.join(project_root, "src"), env.get('PYTHONPATH')) if p)

host = os.getenv("API_HOST", "0.0.0.0")
port = os.getenv("API_PORT", "8000")

# Run uvicorn
if __name__ == "__main__":
    print("Starting plagiarism engine backend...")
    print(f"Project root: {project_root}")
    print(f"API will be available at: http://localhost:{port}")
    print(f"API docs at: http://localhost:{port}/docs")
    print("-" * 50)
    subprocess.run([
        sys.executable,
        "-m",
        "uvicorn",
        "plagiarism_engine.api.main:app",
        "--reload",
        "--host",
        host,
        "--port",
        port
    ], env=env)
