import os
import tempfile

# Settings are read once per process, so the environment must be ready before
# any screendiff module is imported.
_workdir = tempfile.mkdtemp(prefix="screendiff-tests-")
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("UPLOADS_DIR", os.path.join(_workdir, "uploads"))
os.environ.setdefault("OUTPUT_DIR", os.path.join(_workdir, "output"))
